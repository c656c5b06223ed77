from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class MemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = (
            "member_no",
            "first_name",
            "last_name",
            "email",
            "phone",
            "is_member",
            "is_active",
            "reference",
        )
        read_only_fields = fields


class UserLoginSerializer(serializers.Serializer):
    member_no = serializers.CharField(required=True)
    password = serializers.CharField(required=True, write_only=True)
