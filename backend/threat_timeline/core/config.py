from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    project_name: str = "threat-timeline"
    log_level: str = "INFO"

    cors_origins: list[str] = [
        "http://localhost:3001",
        "http://127.0.0.1:3001",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    load_demo_on_startup: bool = False

    report_dir: str = "/data/reports"
    report_generate_pdf: bool = False

    # diagram geometry, in canvas units
    layout_node_width: float = 220.0
    layout_node_height: float = 80.0
    layout_horizontal_gap: float = 40.0
    layout_vertical_gap: float = 70.0
    layout_cluster_gap: float = 120.0


settings = Settings()
