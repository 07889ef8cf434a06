from pydantic import BaseModel

from fulfillment_kpi.utils.errors import ConfigError


class SecretConfig(BaseModel):
    shop_domain: str = ''
    admin_token: str = ''

    def require(self) -> "SecretConfig":
        """
        Pre-flight check: both values must be present before any network call.
        """
        missing = [
            env
            for env, value in (
                ("SHOP_DOMAIN", self.shop_domain),
                ("ADMIN_TOKEN", self.admin_token),
            )
            if not (value or "").strip()
        ]
        if missing:
            raise ConfigError(f"Missing {' or '.join(missing)}.")
        return self
