import pytest

TTP_HEADER_LINE = "BEGIN:ApplicationVersion=TomTom Positioning 0.7"


def ttp_record(ts, code, lat, lon, speed):
    """One TTP location record: timestamp, type, _, lon, _, lat, 5 x _, speed."""
    return f"{ts},{code},0,{lon},0,{lat},0,0,0,0,0,{speed}"


def ttp_log(*records, header=TTP_HEADER_LINE):
    return "\n".join([header, *records]) + "\n"


@pytest.fixture
def structured_route():
    return {
        "legs": [
            {
                "points": [
                    {"latitude": 52.0, "longitude": 4.0},
                    {"latitude": 52.1, "longitude": 4.1},
                ],
                "summary": {"lengthInMeters": 13000, "travelTimeInSeconds": 600},
            },
            {
                "points": [
                    {"latitude": 52.1, "longitude": 4.1},
                    {"latitude": 52.2, "longitude": 4.3},
                ],
            },
        ],
        "summary": {
            "lengthInMeters": 31000,
            "travelTimeInSeconds": 1500,
            "trafficDelayInSeconds": 60,
            "departureTime": "2024-03-01T10:00:00+01:00",
            "arrivalTime": "2024-03-01T10:25:00+01:00",
        },
        "guidance": {
            "instructions": [
                {
                    "drivingSide": "RIGHT",
                    "maneuver": "DEPART",
                    "maneuverPoint": {"latitude": 52.0, "longitude": 4.0},
                    "routeOffsetInMeters": 0,
                    "routePath": [
                        {
                            "distanceInMeters": 0,
                            "point": {"latitude": 52.0, "longitude": 4.0},
                            "travelTimeInSeconds": 0,
                        },
                    ],
                },
            ],
        },
    }
