from django.http import JsonResponse
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.governance.services import audit, request_meta
from .stores import get_store


def health(request):
    return JsonResponse({"ok": True})


class HealthCheckView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({"status": "ok"})


class StoreAPIView(APIView):
    """APIView that works on snapshots from the configured persistence store."""

    permission_classes = [permissions.IsAuthenticated]

    @property
    def store(self):
        return get_store()

    def audit(self, table: str, row_id: str, action: str, before: dict | None = None, after: dict | None = None):
        audit(self.request.user, table, row_id, action, before=before, after=after, meta=request_meta(self.request))
