"""Application configuration settings."""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PLANEXTRACT_",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Floor Plan Extraction Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    # Uploads
    MAX_UPLOAD_SIZE: int = 20 * 1024 * 1024  # 20MB

    # Preprocessing
    MAX_IMAGE_DIMENSION: int = 2000
    ENABLE_DENOISING: bool = True
    ENABLE_CONTRAST: bool = True

    # OCR
    OCR_LANGUAGES: str = "deu+eng"
    OCR_PAGE_SEG_MODE: int = 11  # Sparse text

    # Edge detection
    EDGE_LOW_THRESHOLD: int = 50
    EDGE_HIGH_THRESHOLD: int = 100

    # Line detection (the extraction pipeline is more permissive than the
    # detector defaults of 100 votes / 50px)
    HOUGH_THRESHOLD: int = 80
    MIN_LINE_LENGTH: float = 40.0

    # Line merging
    WALL_ANGLE_THRESHOLD: float = 5.0  # degrees from horizontal/vertical
    MERGE_DISTANCE_THRESHOLD: float = 15.0
    MERGE_ANGLE_THRESHOLD: float = 2.0

    # Room detection
    MIN_ROOM_AREA: int = 500  # pixels

    # Calibration
    CALIBRATION_MAX_DISTANCE: float = 100.0  # pixels between label and wall
    CALIBRATION_MIN_MEASUREMENTS: int = 2
    CALIBRATION_MAX_CV: float = 0.05

    # Room naming
    NAMING_MAX_DISTANCE: float = 200.0
    NAMING_MIN_CONFIDENCE: float = 60.0
    DEFAULT_ROOM_NAME: str = "Raum"


# Global settings instance
settings = Settings()
