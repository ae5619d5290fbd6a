"""GeoPoint value object and great-circle distance."""

import math

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float

from grocery.domain import grocery

EARTH_RADIUS_METERS = 6_371_000


@grocery.value_object
class GeoPoint:
    """A latitude/longitude pair. Both coordinates are required."""

    latitude: Float(min_value=-90.0, max_value=90.0)
    longitude: Float(min_value=-180.0, max_value=180.0)

    @invariant.post
    def both_coordinates_required(self):
        if self.latitude is None or self.longitude is None:
            raise ValidationError({"location": ["Both latitude and longitude are required"]})

    def distance_to(self, latitude: float, longitude: float) -> float:
        return haversine_meters(self.latitude, self.longitude, latitude, longitude)


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(a))
