from pydantic import BaseModel

from enums.installation_price_source import InstallationPriceSource


class InstallationPriceDTO(BaseModel):
    """
    Outcome of installation price resolution.

    available=False is the only signal for "not offered / no rule".
    A price of 0 with available=True is an intentionally free installation.
    """
    price: float | None = None
    source: InstallationPriceSource = InstallationPriceSource.NONE
    available: bool = False

    @classmethod
    def unavailable(cls) -> 'InstallationPriceDTO':
        return cls(price=None, source=InstallationPriceSource.NONE, available=False)
