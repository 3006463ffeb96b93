from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response

from .permissions import HasAdminCredential
from .serializers import decode_mutation
from .services import get_lists, mutate


class ListsView(APIView):
    """
    - GET  /lists?userId=<id>  -> every standard and custom list row for a user
    - POST /lists              -> apply one action (needs X-Admin-Credential)

    POST body: {"action": ..., "userId": ..., plus the action's fields}
    """

    authentication_classes = []
    permission_classes = [HasAdminCredential]

    def get(self, request):
        data = get_lists(request.query_params.get("userId"))
        return Response(data, status=status.HTTP_200_OK)

    def post(self, request):
        action, fields = decode_mutation(request.data)
        result = mutate(action, fields)
        return Response({"success": True, **result}, status=status.HTTP_200_OK)
