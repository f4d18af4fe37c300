"""Plugin registry - discovers and loads plugins via entry points."""

from __future__ import annotations

import logging
from functools import lru_cache
from importlib.metadata import entry_points
from typing import TYPE_CHECKING

from ..exceptions import ConfigurationError

if TYPE_CHECKING:
    from ..application.ports.geodesy import GeodesicCalculator
    from ..application.ports.object_detector import ObjectDetector

logger = logging.getLogger(__name__)


class PluginRegistry:
    """Registry for discovering and loading plugins.
    
    Uses entry points for plugin discovery:
    - land_measure.detectors: Object detector implementations
    - land_measure.geodesy: Geodesic calculator implementations
    
    Third-party packages can register plugins:
    
    [project.entry-points."land_measure.detectors"]
    my_detector = "my_package:MyDetector"
    """
    
    DETECTOR_GROUP = "land_measure.detectors"
    GEODESY_GROUP = "land_measure.geodesy"
    
    @staticmethod
    def _load_group(group: str) -> dict[str, type]:
        found = {}
        for ep in entry_points(group=group):
            try:
                found[ep.name] = ep.load()
                logger.debug(f"Discovered {group} plugin: {ep.name}")
            except Exception as e:
                logger.warning(f"Failed to load {group} plugin {ep.name}: {e}")
        return found
    
    @classmethod
    @lru_cache(maxsize=1)
    def discover_detectors(cls) -> dict[str, type]:
        """Discover all available object detectors.
        
        Returns:
            Dict mapping detector names to classes
        """
        detectors = cls._load_group(cls.DETECTOR_GROUP)
        
        # Built-ins win over plugins with the same name
        from ..adapters.detectors.torchvision_adapter import TorchvisionDetector
        from ..config import DetectorType
        
        for detector_type in DetectorType:
            detectors[detector_type.value] = TorchvisionDetector
        
        return detectors
    
    @classmethod
    @lru_cache(maxsize=1)
    def discover_geodesy(cls) -> dict[str, type]:
        """Discover all available geodesic calculators."""
        calculators = cls._load_group(cls.GEODESY_GROUP)
        
        from ..adapters.geodesy.pyproj_adapter import PyprojGeodesy
        calculators["pyproj"] = PyprojGeodesy
        
        return calculators
    
    @classmethod
    def create_detector(cls, name: str, **kwargs) -> "ObjectDetector":
        """Create detector instance by name.
        
        Args:
            name: Detector name (e.g., 'ssdlite', 'faster_rcnn')
            **kwargs: Constructor arguments
        
        Returns:
            ObjectDetector instance
        
        Raises:
            ConfigurationError: If detector not found
        """
        detectors = cls.discover_detectors()
        
        if name not in detectors:
            available = ", ".join(detectors.keys())
            raise ConfigurationError(
                f"Unknown detector: {name}. Available: {available}",
                config_key="detector"
            )
        
        from ..config import DetectorType
        
        if name in {t.value for t in DetectorType}:
            kwargs.setdefault("detector_type", DetectorType(name))
        return detectors[name](**kwargs)
    
    @classmethod
    def create_geodesy(cls, name: str = "pyproj", **kwargs) -> "GeodesicCalculator":
        """Create geodesic calculator instance by name."""
        calculators = cls.discover_geodesy()
        
        if name not in calculators:
            available = ", ".join(calculators.keys())
            raise ConfigurationError(
                f"Unknown geodesy backend: {name}. Available: {available}",
                config_key="geodesy"
            )
        
        return calculators[name](**kwargs)
    
    @classmethod
    def list_available_detectors(cls) -> list[str]:
        """List available detector names."""
        return list(cls.discover_detectors().keys())
    
    @classmethod
    def list_available_geodesy(cls) -> list[str]:
        """List available geodesy backend names."""
        return list(cls.discover_geodesy().keys())
