# users/views.py

from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import effective_capabilities_for, get_user_role


class MeSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    recipient_id = serializers.CharField(help_text="Id used on orders, ledger entries and payouts")
    email = serializers.EmailField()
    first_name = serializers.CharField()
    last_name = serializers.CharField()
    role = serializers.CharField(allow_null=True)
    capabilities = serializers.ListField(child=serializers.CharField())


class MeView(APIView):
    """
    Current user profile plus the resolved role and capabilities, so clients
    can decide which order / earnings / payout screens to offer.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = MeSerializer

    @extend_schema(responses={200: MeSerializer})
    def get(self, request):
        user = request.user
        return Response(
            {
                "id": user.id,
                "recipient_id": user.recipient_id,
                "email": user.email,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "role": get_user_role(user),
                "capabilities": sorted(effective_capabilities_for(request, user)),
            }
        )
