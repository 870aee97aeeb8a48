"""
Credential reset request views.
"""
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.apps.accounts.permissions import IsAdmin
from backend.core.responses import EnvelopeMixin, success

from .models import CredentialResetRequest
from .serializers import (
    AdminResetRequestSerializer,
    ResetRequestCreateSerializer,
    ResetRequestSerializer,
    ResetStatusSerializer,
)
from .services import ResetRequestService


class ResetRequestCreateView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=ResetRequestCreateSerializer, responses={201: ResetRequestSerializer})
    def post(self, request):
        serializer = ResetRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reset_request = ResetRequestService().create_request(user=request.user, **serializer.validated_data)
        return success(
            ResetRequestSerializer(reset_request).data,
            message='Reset request submitted',
            status=status.HTTP_201_CREATED,
        )


class MyResetRequestsView(EnvelopeMixin, generics.ListAPIView):
    serializer_class = ResetRequestSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return CredentialResetRequest.objects.none()
        return ResetRequestService().user_requests(self.request.user)


class AdminResetRequestsView(EnvelopeMixin, generics.ListAPIView):
    serializer_class = AdminResetRequestSerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):
        return ResetRequestService().all_requests(status=self.request.query_params.get('status'))


class ResetRequestStatusView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(request=ResetStatusSerializer, responses={200: AdminResetRequestSerializer})
    def patch(self, request, pk):
        serializer = ResetStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reset_request = ResetRequestService().update_status(
            pk,
            serializer.validated_data['status'],
            admin_response=serializer.validated_data['admin_response'],
            actor=request.user,
        )
        return success(AdminResetRequestSerializer(reset_request).data, message=f'Request {reset_request.status}')
