"""
Accounts Serializers - users, roles and password changes.
"""

from django.contrib.auth import password_validation
from django.contrib.auth.models import Group
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from ..models import User
from ..roles import AssignmentMode


class RoleSerializer(serializers.ModelSerializer):

    class Meta:
        model = Group
        fields = ['id', 'name']


class UserSerializer(serializers.ModelSerializer):
    """User detail with role names and (when annotated) statistics."""

    roles = serializers.SerializerMethodField()
    email_verified = serializers.SerializerMethodField()
    projects_count = serializers.IntegerField(read_only=True)
    created_tickets_count = serializers.IntegerField(read_only=True)
    assigned_tickets_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'name',
            'email',
            'email_verified',
            'email_verified_at',
            'is_active',
            'roles',
            'projects_count',
            'created_tickets_count',
            'assigned_tickets_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['email_verified_at', 'created_at', 'updated_at']

    def get_roles(self, obj):
        return sorted(group.name for group in obj.groups.all())

    def get_email_verified(self, obj):
        return obj.has_verified_email()


class UserCreateSerializer(serializers.ModelSerializer):
    """Create a user with a password and optional initial roles."""

    password = serializers.CharField(write_only=True, trim_whitespace=False)
    roles = serializers.PrimaryKeyRelatedField(
        queryset=Group.objects.all(),
        many=True,
        required=False,
    )

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'password', 'roles']

    def validate_password(self, value):
        password_validation.validate_password(value)
        return value

    def create(self, validated_data):
        roles = validated_data.pop('roles', [])
        user = User.objects.create_user(**validated_data)
        if roles:
            user.groups.set(roles)
        return user

    def to_representation(self, instance):
        return UserSerializer(instance, context=self.context).data


class PasswordChangeSerializer(serializers.Serializer):
    """Change the caller's password; the current password is required."""

    current_password = serializers.CharField(write_only=True, trim_whitespace=False)
    new_password = serializers.CharField(write_only=True, trim_whitespace=False)
    new_password_confirmation = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_current_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError(_('The current password is incorrect.'))
        return value

    def validate(self, attrs):
        if attrs['new_password'] != attrs['new_password_confirmation']:
            raise serializers.ValidationError({
                'new_password_confirmation': _('The password confirmation does not match.')
            })
        if attrs['new_password'] == attrs['current_password']:
            raise serializers.ValidationError({
                'new_password': _('The new password must be different from the current password.')
            })
        password_validation.validate_password(attrs['new_password'], self.context['request'].user)
        return attrs

    def save(self):
        user = self.context['request'].user
        user.set_password(self.validated_data['new_password'])
        user.save(update_fields=['password', 'updated_at'])
        return user


class BulkRoleAssignmentSerializer(serializers.Serializer):
    users = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), many=True)
    roles = serializers.PrimaryKeyRelatedField(queryset=Group.objects.all(), many=True)
    mode = serializers.ChoiceField(choices=AssignmentMode.choices, default=AssignmentMode.ADD)

    def validate_users(self, value):
        if not value:
            raise serializers.ValidationError(_('Select at least one user.'))
        return value

    def validate(self, attrs):
        if attrs['mode'] == AssignmentMode.ADD and not attrs['roles']:
            raise serializers.ValidationError({'roles': _('Select at least one role to add.')})
        return attrs
