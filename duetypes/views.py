from rest_framework import generics

from duetypes.models import DueType
from duetypes.serializers import DueTypeSerializer
from accounts.permissions import IsSystemAdminOrReadOnly


class DueTypeListCreateView(generics.ListCreateAPIView):
    queryset = DueType.objects.all()
    serializer_class = DueTypeSerializer
    permission_classes = [
        IsSystemAdminOrReadOnly,
    ]


class DueTypeDetailView(generics.RetrieveUpdateAPIView):
    queryset = DueType.objects.all()
    serializer_class = DueTypeSerializer
    permission_classes = [
        IsSystemAdminOrReadOnly,
    ]
    lookup_field = "reference"
