"""Distance helpers using the Haversine formula.

Donations store plain latitude and longitude. Nearest-first listings load the candidate rows and sort in Python, so
the distance is computed here rather than by a geospatial index.
"""
import math

EARTH_RADIUS_KM = 6371.0


def haversine_km( lat1, lon1, lat2, lon2 ):
    """Great circle distance between two points in km."""

    phi1 = math.radians( lat1 )
    phi2 = math.radians( lat2 )
    delta_phi = math.radians( lat2 - lat1 )
    delta_lambda = math.radians( lon2 - lon1 )

    a = math.sin( delta_phi / 2 ) ** 2 + math.cos( phi1 ) * math.cos( phi2 ) * math.sin( delta_lambda / 2 ) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2( math.sqrt( a ), math.sqrt( 1 - a ) )


def sort_by_distance( donations, latitude, longitude, radius_km=None ):
    """Pair each donation with its distance from a point, nearest first.

    :param list donations: DonationModels.
    :param float latitude: The point's latitude.
    :param float longitude: The point's longitude.
    :param float radius_km: Drop donations farther than this, optional.
    :return: A list of ( donation, distance in km rounded to one decimal ).
    """

    results = []
    for donation in donations:
        distance = haversine_km( latitude, longitude, donation.latitude, donation.longitude )
        if radius_km is not None and distance > radius_km:
            continue
        results.append( ( donation, distance ) )

    results.sort( key=lambda pair: pair[ 1 ] )
    return [ ( donation, round( distance, 1 ) ) for donation, distance in results ]
