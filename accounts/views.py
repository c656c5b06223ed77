import logging
from rest_framework import generics, status
from rest_framework.views import APIView
from rest_framework.response import Response
from django.contrib.auth import get_user_model, authenticate
from rest_framework.permissions import AllowAny
from rest_framework.authtoken.models import Token

from accounts.serializers import MemberSerializer, UserLoginSerializer
from accounts.permissions import IsSystemAdmin

logger = logging.getLogger(__name__)

User = get_user_model()


class TokenView(APIView):
    """Exchange a member number and password for an API token."""

    permission_classes = (AllowAny,)
    serializer_class = UserLoginSerializer

    def post(self, request, format=None):
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        member_no = serializer.validated_data["member_no"]

        user = authenticate(
            request, member_no=member_no, password=serializer.validated_data["password"]
        )
        if user is None:
            logger.info(f"Failed login attempt for {member_no}")
            return Response(
                {"detail": "Invalid member number or password."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if not user.is_approved:
            return Response(
                {"detail": "Membership has not been approved yet."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        token, _ = Token.objects.get_or_create(user=user)
        details = dict(MemberSerializer(user).data)
        details.update(
            {
                "is_system_admin": user.is_system_admin,
                "is_superuser": user.is_superuser,
                "token": token.key,
            }
        )
        return Response(details, status=status.HTTP_200_OK)


class MemberListView(generics.ListAPIView):
    queryset = User.objects.filter(is_member=True)
    serializer_class = MemberSerializer
    permission_classes = (IsSystemAdmin,)
