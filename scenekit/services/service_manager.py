"""
Service Manager - Central Service Coordination
==============================================

Builds the services for one host and provides a unified interface for
the Flask application.
"""

import logging
from typing import Any, Dict, Optional

from . import ServiceResult
from ..core.host import HostPlatform
from ..core.housekeeping import GlobalVariableStore, Housekeeper
from ..core.loop import HousekeepingLoop
from .housekeeping_service import HousekeepingService


class ServiceManager:
    """Central manager for all application services."""

    def __init__(self, host: HostPlatform, config: Dict[str, Any]):
        self.logger = logging.getLogger("service_manager")
        self.host = host
        self.config = config

        store = GlobalVariableStore(host, config.get("housekeeping_variable", "HOUSEKEEPING"))
        self.housekeeper = Housekeeper(host, store=store)
        self.loop = HousekeepingLoop(self.housekeeper, config.get("poll_interval_seconds", 60))
        self.housekeeping = HousekeepingService(self.housekeeper, self.loop)

        self.services = {
            "housekeeping": self.housekeeping,
        }
        self._initialize_all()

    def _initialize_all(self) -> None:
        self.logger.info("🚀 Initializing service manager...")
        for name, service in self.services.items():
            result = service.initialize()
            if result.success:
                self.logger.info(f"✅ {name} service initialized")
            else:
                self.logger.error(f"❌ {name} service initialization failed: {result.message}")

    def get_service(self, name: str) -> Optional[Any]:
        return self.services.get(name)

    def health_check_all(self) -> ServiceResult:
        """Perform health check on all services."""
        results = {}
        overall_healthy = True
        for name, service in self.services.items():
            health = service.health_check()
            results[name] = {
                "healthy": health.success,
                "status": health.data if health.success else {"error": health.message},
            }
            overall_healthy = overall_healthy and health.success

        return ServiceResult(
            success=True,
            data={
                "overall_healthy": overall_healthy,
                "services": results,
                "total_services": len(self.services),
                "healthy_services": sum(1 for r in results.values() if r["healthy"]),
            },
            message="Health check completed for all services",
        )

    def start_background(self) -> None:
        if self.config.get("housekeeping_enabled", True):
            self.loop.start()
        else:
            self.logger.info("Housekeeping loop disabled by configuration")

    def shutdown(self) -> None:
        if self.loop.running:
            self.loop.stop()
