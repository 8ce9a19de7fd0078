from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, Setting, AuditLog
from .pages import PAGES, ACTIONS, effective_permissions


def validate_page_access_value(value):
    if not isinstance(value, list):
        raise serializers.ValidationError("page_access must be a list of page ids")
    unknown = [page for page in value if page not in PAGES]
    if unknown:
        raise serializers.ValidationError(f"Unknown pages: {', '.join(map(str, unknown))}")
    return value


def validate_page_permissions_value(value):
    if not isinstance(value, dict):
        raise serializers.ValidationError("page_permissions must be an object keyed by page id")
    for page, flags in value.items():
        if page not in PAGES:
            raise serializers.ValidationError(f"Unknown page: {page}")
        if not isinstance(flags, dict):
            raise serializers.ValidationError(f"Permissions for {page} must be an object")
        for action in flags:
            if action not in ACTIONS:
                raise serializers.ValidationError(f"Unknown action '{action}' for page {page}")
    return value


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'full_name', 'code', 'phone',
                  'role', 'page_access', 'page_permissions', 'is_active', 'is_staff', 'is_superuser',
                  'created_at', 'updated_at']
        read_only_fields = ['is_superuser', 'created_at', 'updated_at']

    def validate_page_access(self, value):
        return validate_page_access_value(value)

    def validate_page_permissions(self, value):
        return validate_page_permissions_value(value)


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name',
                  'full_name', 'code', 'phone', 'role', 'page_access', 'page_permissions']

    def validate_page_access(self, value):
        return validate_page_access_value(value)

    def validate_page_permissions(self, value):
        return validate_page_permissions_value(value)

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        user = User.objects.create(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class PageAccessSerializer(serializers.Serializer):
    page_access = serializers.ListField(child=serializers.CharField())
    page_permissions = serializers.DictField(required=False)
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES, required=False)

    def validate_page_access(self, value):
        return validate_page_access_value(value)

    def validate_page_permissions(self, value):
        return validate_page_permissions_value(value)


class CurrentUserSerializer(UserSerializer):
    permissions = serializers.SerializerMethodField()
    is_admin = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['permissions', 'is_admin']

    def get_permissions(self, obj):
        return effective_permissions(obj)

    def get_is_admin(self, obj):
        return obj.is_admin_role


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ['id', 'key', 'value', 'description', 'updated_at']


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'username', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']
