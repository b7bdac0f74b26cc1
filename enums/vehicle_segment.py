from enum import Enum


class VehicleSegment(str, Enum):
    """
    Vehicle size/class bucket used to price installation labour.

    Values match the labels stored in installation rate tables.
    """

    HATCHBACK = "Hatchback"
    SEDAN = "Sedan"
    SUV = "SUV"
    MUV = "MUV"
    LUXURY = "Luxury"

    @classmethod
    def from_string(cls, value: str) -> 'VehicleSegment':
        """
        Convert string to VehicleSegment enum.

        Matches either the value ("SUV", "Sedan") or the member name
        ("SEDAN"), case-insensitively.

        Raises:
            ValueError: If value doesn't match any segment
        """
        if not isinstance(value, str):
            raise ValueError(f"Vehicle segment must be a string, got {type(value)}")

        normalized = value.strip().lower()
        for segment in cls:
            if segment.value.lower() == normalized or segment.name.lower() == normalized:
                return segment

        valid_values = ", ".join(s.value for s in cls)
        raise ValueError(f"Unknown vehicle segment '{value}'. Valid values: {valid_values}")
