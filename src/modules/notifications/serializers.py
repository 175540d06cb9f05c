"""Input serializers for the email endpoints."""

from __future__ import annotations

from rest_framework import serializers


class OrderConfirmationSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()


class OrderConfirmationByNumberSerializer(serializers.Serializer):
    order_number = serializers.CharField(max_length=32)


class CustomNotificationSerializer(serializers.Serializer):
    to = serializers.EmailField()
    subject = serializers.CharField(max_length=255)
    message = serializers.CharField()
