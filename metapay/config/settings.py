from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    DATABASE_URL: str
    SELLAUTH_API_URL: str = "https://api.sellauth.com/v1"
    SELLAUTH_CHECKOUT_URL: str = "https://checkout.sellauth.com/invoice"
    SELLAUTH_TOKEN: Optional[str] = None
    SELLAUTH_TIMEOUT_SECONDS: float = 10.0
    SELLAUTH_IPS: str = ""              # comma separated webhook source allow-list
    SELLAUTH_GATEWAY: str = "NMI"
    MASTER_SHOP_ID: Optional[str] = None
    DUMMY_PRODUCT_ID: Optional[str] = None
    DUMMY_VARIANT_ID: Optional[str] = None
    CHECKOUT_CUSTOMER_IP: str = "8.8.8.8"

    class Config:
        env_file = ".env"
        extra="ignore"

    @property
    def sellauth_allowed_ips(self) -> List[str]:
        return [ip.strip() for ip in self.SELLAUTH_IPS.split(",") if ip.strip()]

config_settings = Settings()
