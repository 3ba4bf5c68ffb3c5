# agents/base.py
"""
Base agent class for all AI agents in the system
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple, Type, TypeVar, Generic, List
from pydantic import BaseModel
import logging
from datetime import datetime

from core.config import get_settings
from core.cache import CacheManager
from core.exceptions import ClassificationUnavailable, MalformedResponse

# Type variables for generic typing
RequestType = TypeVar('RequestType', bound=BaseModel)
ResponseType = TypeVar('ResponseType', bound=BaseModel)

class BaseAgent(ABC, Generic[RequestType, ResponseType]):
    """
    Base class for all AI agents

    Provides common functionality like:
    - Configuration management
    - Caching of successful responses
    - Conversion of recoverable failures into fallback responses
    - Logging
    """

    # Failures turned into a fallback response instead of being raised
    recoverable_errors: Tuple[Type[Exception], ...] = (ClassificationUnavailable, MalformedResponse)

    def __init__(self, agent_name: str, cache: Optional[CacheManager] = None):
        self.agent_name = agent_name
        self.settings = get_settings()
        self.config = self.settings.get_agent_config(agent_name)
        self.logger = logging.getLogger(f"agents.{agent_name}")
        if cache is None and self.settings.cache_enabled:
            cache = CacheManager(
                max_size=self.settings.cache_max_size,
                ttl=self.settings.cache_default_ttl
            )
        self.cache = cache

        # Validate configuration
        self._validate_config()

        self.logger.info(f"Initialized {agent_name} agent")

    @abstractmethod
    def _validate_config(self) -> None:
        """Validate agent-specific configuration"""
        pass

    @abstractmethod
    async def process_request(self, request: RequestType) -> ResponseType:
        """Process agent request - must be implemented by subclasses"""
        pass

    @abstractmethod
    def get_fallback_response(self, request: RequestType, error: Exception) -> ResponseType:
        """Get fallback response when agent fails"""
        pass

    @abstractmethod
    def _get_response_class(self) -> Type[ResponseType]:
        """Response model used to rebuild cached entries"""
        pass

    def get_cache_key(self, request: RequestType) -> str:
        """Generate cache key for request"""
        return f"{self.agent_name}:{request.model_dump_json()}"

    async def get_cached_response(self, cache_key: str) -> Optional[Dict[str, Any]]:
        """Get cached response if available"""
        if not self.cache:
            return None

        cached_data = await self.cache.get(cache_key)
        if cached_data:
            self.logger.info(f"Cache hit for {self.agent_name} request")
        return cached_data

    async def set_cached_response(self, cache_key: str, response: ResponseType) -> None:
        """Cache response"""
        if not self.cache:
            return

        await self.cache.set(cache_key, response.model_dump())
        self.logger.debug(f"Cached {self.agent_name} response")

    async def execute(self, request: RequestType, use_cache: bool = True) -> ResponseType:
        """
        Main execution method with caching and error handling.

        Errors listed in ``recoverable_errors`` become the agent's fallback
        response. Anything else (bad input, missing configuration) propagates
        to the caller unchanged.
        """
        start_time = datetime.now()
        cache_key = self.get_cache_key(request) if use_cache and self.cache else None

        if cache_key:
            cached_response = await self.get_cached_response(cache_key)
            if cached_response:
                return self._get_response_class()(**cached_response)

        try:
            self.logger.info(f"Processing {self.agent_name} request")
            response = await self.process_request(request)
        except self.recoverable_errors as e:
            self.logger.error(f"{self.agent_name} request failed: {e}")
            fallback_response = self.get_fallback_response(request, e)
            self.logger.info("Returned fallback response")
            return fallback_response

        if cache_key:
            await self.set_cached_response(cache_key, response)

        execution_time = (datetime.now() - start_time).total_seconds()
        self.logger.info(f"Request processed in {execution_time:.2f}s")

        return response

    async def health_check(self) -> Dict[str, Any]:
        """Agent health check"""
        try:
            self._validate_config()

            return {
                "agent": self.agent_name,
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
                "config_valid": True,
                "cache_enabled": self.cache is not None
            }
        except Exception as e:
            return {
                "agent": self.agent_name,
                "status": "unhealthy",
                "timestamp": datetime.now().isoformat(),
                "error": str(e),
                "config_valid": False
            }

    def get_agent_info(self) -> Dict[str, Any]:
        """Get agent information"""
        return {
            "name": self.agent_name,
            "version": "1.0.0",
            "config": self.config,
            "cache_enabled": self.cache is not None,
            "description": self.__class__.__doc__ or f"{self.agent_name} agent"
        }

class AgentRegistry:
    """Registry for managing multiple agents"""

    def __init__(self):
        self._agents: Dict[str, BaseAgent] = {}
        self.logger = logging.getLogger("agents.registry")

    def register(self, agent: BaseAgent) -> None:
        """Register an agent"""
        self._agents[agent.agent_name] = agent
        self.logger.info(f"Registered agent: {agent.agent_name}")

    def unregister(self, agent_name: str) -> None:
        """Remove an agent if present"""
        self._agents.pop(agent_name, None)

    def get(self, agent_name: str) -> Optional[BaseAgent]:
        """Get agent by name"""
        return self._agents.get(agent_name)

    def list_agents(self) -> List[str]:
        """List all registered agent names"""
        return list(self._agents.keys())

    async def health_check_all(self) -> Dict[str, Any]:
        """Health check all agents"""
        results = {}
        for name, agent in self._agents.items():
            results[name] = await agent.health_check()
        return results

    def get_agents_info(self) -> Dict[str, Any]:
        """Get information about all agents"""
        return {
            name: agent.get_agent_info()
            for name, agent in self._agents.items()
        }

# Global agent registry
agent_registry = AgentRegistry()
