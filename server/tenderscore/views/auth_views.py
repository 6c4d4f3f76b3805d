# server/tenderscore/views/auth_views.py

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.authtoken.models import Token
from django.contrib.auth import authenticate

import logging

from ..models import Vendor, Notification
from ..serializers import UserSerializer, VendorSerializer
from ..utils import log_action

logger = logging.getLogger('tenderscore')


class LoginView(APIView):
    """Handle user login and token generation"""
    permission_classes = []

    def post(self, request):
        username = request.data.get('username')
        password = request.data.get('password')

        if not username or not password:
            return Response(
                {'error': 'Please provide both username and password'},
                status=status.HTTP_400_BAD_REQUEST
            )

        user = authenticate(username=username, password=password)

        if user is None:
            logger.warning(f"Failed login attempt for {username}")
            return Response(
                {'error': 'Invalid credentials'},
                status=status.HTTP_401_UNAUTHORIZED
            )

        # Replace any existing token
        Token.objects.filter(user=user).delete()
        token = Token.objects.create(user=user)

        log_action(user, 'login', user, {'method': 'token'}, request)

        return Response({
            'token': token.key,
            'user_id': user.id,
            'username': user.username,
            'role': user.role,
            'email': user.email,
            'first_name': user.first_name,
            'last_name': user.last_name
        })


class LogoutView(APIView):
    """Handle user logout and token deletion"""
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        log_action(request.user, 'logout', request.user, {'method': 'token'}, request)
        Token.objects.filter(user=request.user).delete()
        return Response(
            {'message': 'Successfully logged out'},
            status=status.HTTP_200_OK
        )


class UserProfileView(APIView):
    """Handle user profile operations"""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        user = request.user
        data = UserSerializer(user).data

        if user.role == 'vendor':
            data['vendors'] = VendorSerializer(Vendor.objects.filter(users=user), many=True).data

        data['unread_notifications'] = Notification.objects.filter(user=user, is_read=False).count()
        return Response(data)

    def put(self, request):
        user = request.user

        if 'role' in request.data and user.role != 'admin':
            return Response(
                {'error': 'Role cannot be changed through profile update'},
                status=status.HTTP_403_FORBIDDEN
            )

        serializer = UserSerializer(user, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        serializer.save()
        log_action(user, 'update_profile', user, {'fields': sorted(request.data.keys())}, request)
        return Response(serializer.data)
