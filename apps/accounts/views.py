import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema

from config.responses import action_response

from .serializers import (
    AuthResponseSerializer,
    ChangePasswordSerializer,
    CustomerRegistrationSerializer,
    LoginSerializer,
    LogoutSerializer,
    UserSerializer,
)
from .services import authenticate_user, change_password, register_customer_account

logger = logging.getLogger(__name__)


def _auth_payload(user):
    refresh = RefreshToken.for_user(user)
    return {
        'user': UserSerializer(user).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        },
    }


@extend_schema(
    request=LoginSerializer,
    responses={200: AuthResponseSerializer},
    description="Authenticate with email and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = authenticate_user(
        **serializer.validated_data,
        ip=request.META.get('HTTP_X_FORWARDED_FOR') or request.META.get('REMOTE_ADDR', ''),
        user_agent=request.META.get('HTTP_USER_AGENT', ''),
    )
    return action_response(_auth_payload(user))


@extend_schema(
    request=LogoutSerializer,
    responses={200: None},
    description="Blacklist the refresh token so it can no longer be used.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    serializer = LogoutSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        RefreshToken(serializer.validated_data['refresh']).blacklist()
    except TokenError as e:
        logger.info("Logout with unusable refresh token for %s: %s", request.user.email, e)
        return Response(
            {'success': False, 'error': 'Invalid token'},
            status=status.HTTP_400_BAD_REQUEST,
        )
    return action_response()


@extend_schema(responses={200: UserSerializer}, tags=['auth'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Current user with role."""
    return Response(UserSerializer(request.user).data)


@extend_schema(request=ChangePasswordSerializer, responses={200: None}, tags=['auth'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password_view(request):
    serializer = ChangePasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    change_password(user=request.user, **serializer.validated_data)
    return action_response()


@extend_schema(
    request=CustomerRegistrationSerializer,
    responses={201: AuthResponseSerializer},
    description="Create a customer portal login for an existing shop customer.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register_customer(request):
    serializer = CustomerRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    data.pop('password_confirm')
    user = register_customer_account(**data)
    return action_response(_auth_payload(user), status=status.HTTP_201_CREATED)
