import math

from django.conf import settings
from django.db import models


class Store(models.Model):
    """Shops/outlets. Sales, stock and attendance are all recorded per store."""
    SHOP_TYPE_CHOICES = [
        ('retail', 'Retail Shop'),
        ('restaurant', 'Restaurant'),
        ('warehouse', 'Warehouse'),
        ('other', 'Other'),
    ]

    name = models.CharField(max_length=200)
    code = models.CharField(max_length=50, unique=True)
    shop_type = models.CharField(max_length=20, choices=SHOP_TYPE_CHOICES, default='retail')
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    geo_fence_radius = models.PositiveIntegerField(default=100, help_text="Check-in radius in metres")
    manager = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='managed_stores')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'stores'
        ordering = ['name']

    def has_location(self):
        return self.latitude is not None and self.longitude is not None

    def distance_to(self, latitude, longitude):
        """Great-circle distance in metres from the store to a point"""
        return haversine_distance(float(self.latitude), float(self.longitude), float(latitude), float(longitude))

    def is_within_geo_fence(self, latitude, longitude):
        if not self.has_location():
            return True
        return self.distance_to(latitude, longitude) <= self.geo_fence_radius


def haversine_distance(lat1, lon1, lat2, lon2):
    earth_radius = 6371000
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * earth_radius * math.asin(math.sqrt(a))
