from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    HTTP_TIMEOUT: float = 10.0

    BUSINESS_NAME: str = "Parrylicious Studio"
    BUSINESS_TIMEZONE: str = "Europe/Berlin"
    BUSINESS_ADDRESS: str = "Bahlenstrasse 42, 40589 Duesseldorf"
    ALLOWED_ORIGIN: str = "*"

    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_ANON_KEY: str | None = None

    STRIPE_SECRET_KEY: str | None = None
    STRIPE_WEBHOOK_SECRET: str | None = None
    STRIPE_API_BASE: str = "https://api.stripe.com/v1"
    STRIPE_CURRENCY: str = "eur"
    STRIPE_WEBHOOK_TOLERANCE_SECONDS: int = 300

    RESEND_API_KEY: str | None = None
    RESEND_FROM_EMAIL: str | None = None
    RESEND_API_URL: str = "https://api.resend.com/emails"

    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_FROM_NUMBER: str | None = None
    TWILIO_API_BASE: str = "https://api.twilio.com/2010-04-01"

    SLOT_CAPACITY: int = 4
    # Python weekday numbers, Monday == 0
    OPEN_WEEKDAYS: list[int] = [1, 2, 3, 4, 5]
    OPEN_START: str = "11:00"
    OPEN_END: str = "19:30"
    SLOT_STEP_MINUTES: int = 30
    MAX_DAYS_AHEAD: int = 60

    DRAFT_STORE_DIR: str = "./data/drafts"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY)

    @property
    def is_local(self) -> bool:
        return self.ENV.lower() in {"dev", "local"}


settings = Settings()
