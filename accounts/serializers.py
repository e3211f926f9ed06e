"""
Accounts Serializers - registration input and account output
"""

from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from agencies.models import Agency

from .models import User


# ==================== OUTPUT ====================

class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'uuid', 'email', 'role', 'first_name', 'last_name', 'date_joined']
        read_only_fields = fields


class AgencySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Agency
        fields = ['id', 'uuid', 'name', 'website']
        read_only_fields = fields


# ==================== REGISTRATION ====================

class RegistrationSerializer(serializers.Serializer):
    """Fields shared by every registration form."""

    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        validators=[validate_password],
        style={'input_type': 'password'},
    )


class CandidateRegistrationSerializer(RegistrationSerializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')


class AgencyRegistrationSerializer(RegistrationSerializer):
    agency_name = serializers.CharField(min_length=3, max_length=200)
    website = serializers.URLField(required=False, allow_blank=True, default='')
