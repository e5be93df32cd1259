"""
Configuration management for Standards DB.
"""

from pathlib import Path
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Table files making up the standards corpus, one per domain.
DEFAULT_STANDARDS_FILES: List[str] = [
    "OpenStudio_Standards_boilers.json",
    "OpenStudio_Standards_chillers.json",
    "OpenStudio_Standards_climate_zone_sets.json",
    "OpenStudio_Standards_climate_zones.json",
    "OpenStudio_Standards_construction_properties.json",
    "OpenStudio_Standards_construction_sets.json",
    "OpenStudio_Standards_constructions.json",
    "OpenStudio_Standards_curves.json",
    "OpenStudio_Standards_ground_temperatures.json",
    "OpenStudio_Standards_heat_pumps_heating.json",
    "OpenStudio_Standards_heat_pumps.json",
    "OpenStudio_Standards_materials.json",
    "OpenStudio_Standards_motors.json",
    "OpenStudio_Standards_prototype_inputs.json",
    "OpenStudio_Standards_schedules.json",
    "OpenStudio_Standards_space_types.json",
    "OpenStudio_Standards_templates.json",
    "OpenStudio_Standards_unitary_acs.json",
    "OpenStudio_Standards_heat_rejection.json",
    "OpenStudio_Standards_exterior_lighting.json",
    "OpenStudio_Standards_parking.json",
    "OpenStudio_Standards_entryways.json",
    "OpenStudio_Standards_necb_climate_zones.json",
    "OpenStudio_Standards_necb_fdwr.json",
    "OpenStudio_Standards_necb_hvac_system_selection_type.json",
    "OpenStudio_Standards_necb_surface_conductances.json",
    "OpenStudio_Standards_water_heaters.json",
    "OpenStudio_Standards_economizers.json",
    "OpenStudio_Standards_refrigerated_cases.json",
    "OpenStudio_Standards_walkin_refrigeration.json",
    "OpenStudio_Standards_refrigeration_compressors.json",
]


class Settings(BaseSettings):
    """
    Application settings.

    Can be configured via environment variables (STDDB_*) or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="STDDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Corpus location
    data_dir: Path = Field(default=Path("data/standards"), description="Directory holding the table files")
    standards_files: List[str] = Field(
        default_factory=lambda: list(DEFAULT_STANDARDS_FILES),
        description="Table files to load, merged in sorted name order",
    )
    skip_missing_files: bool = Field(
        default=False, description="Skip (with a warning) listed files absent from data_dir"
    )

    # In-memory representation
    key_mode: Literal["string", "interned"] = Field(
        default="string", description="Plain str keys or sys.intern'ed keys"
    )
    use_index: bool = Field(default=True, description="Build predicate indexes for repeated lookups")

    # Logging
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(default=False)
    log_dir: Path = Field(default=Path("logs"))

    @property
    def standards_paths(self) -> List[Path]:
        """Absolute-or-relative paths of the table files in load order."""
        return [self.data_dir / name for name in sorted(self.standards_files)]


# Global settings instance
settings = Settings()
