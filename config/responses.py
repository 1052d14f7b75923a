from rest_framework import status as http_status
from rest_framework.response import Response


def action_response(data=None, status=http_status.HTTP_200_OK):
    """Wrap the result of a state-changing endpoint in the success envelope."""
    return Response({'success': True, 'data': data}, status=status)
