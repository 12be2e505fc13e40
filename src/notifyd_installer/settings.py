from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

UNIT_NAME = "headsetcontrol-notifyd.service"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="NOTIFYD_", env_file=".env", extra="ignore")

    unit_name: str = Field(default=UNIT_NAME)
    template_path: str = Field(default=f"./{UNIT_NAME}")
    unit_dir: str = Field(default="/etc/systemd/user")
    placeholder: str = Field(default="USER_NAME")
    user: str | None = Field(default=None)

    use_sudo: bool = True
    sudo_noninteractive: bool = False
    # older install script ran `sudo systemctl --user ...`
    systemctl_sudo: bool = False

    log_level: str = Field(default="INFO")
    log_file: str | None = Field(default=None)
    log_console: bool = True


settings = Settings()
