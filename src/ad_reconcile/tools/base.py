"""Base class for AD reconcile MCP tools."""

import json
from typing import List, Dict, Any, Optional
from abc import ABC, abstractmethod

from mcp.types import TextContent as Content
from ldap3.core.exceptions import LDAPException

from ..config.models import Config
from ..core.directory import Directory
from ..core.errors import ReconcileError
from ..core.logging import get_logger


class BaseTool(ABC):
    """Base class for all tools."""
    
    def __init__(self, directory: Directory, config: Config):
        """
        Initialize base tool.
        
        Args:
            directory: Directory used for queries
            config: Loaded configuration
        """
        self.directory = directory
        self.config = config
        self.logger = get_logger(self.__class__.__name__)
    
    def _format_response(self, data: Any, operation: str = "operation") -> List[Content]:
        """
        Format response data for MCP.
        
        Args:
            data: Data to format
            operation: Operation name for logging
            
        Returns:
            List of MCP content objects
        """
        try:
            if isinstance(data, (dict, list)):
                formatted_data = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            else:
                formatted_data = str(data)
            
            return [Content(type="text", text=formatted_data)]
            
        except (TypeError, ValueError) as e:
            self.logger.error(f"Error formatting response for {operation}: {e}")
            error_response = {
                "error": f"Failed to format response: {str(e)}",
                "operation": operation
            }
            return [Content(type="text", text=json.dumps(error_response, indent=2))]
    
    def _handle_error(self, e: Exception, operation: str) -> List[Content]:
        """
        Log a failed operation and format the error response.
        
        Args:
            e: Exception that occurred
            operation: Operation that failed
            
        Returns:
            List of MCP content objects with error information
        """
        error_msg = str(e)
        
        if isinstance(e, (ReconcileError, LDAPException)):
            self.logger.error(f"{operation} failed: {error_msg}")
        else:
            self.logger.exception(f"Unexpected error during {operation}: {error_msg}")
        
        error_response = {
            "success": False,
            "error": error_msg,
            "operation": operation,
            "type": type(e).__name__
        }
        
        return [Content(type="text", text=json.dumps(error_response, indent=2))]
    
    def _success_response(self, message: str, data: Optional[Dict[str, Any]] = None) -> List[Content]:
        """
        Create success response.
        
        Args:
            message: Success message
            data: Optional additional data
            
        Returns:
            List of MCP content objects
        """
        response = {
            "success": True,
            "message": message
        }
        
        if data:
            response.update(data)
        
        return [Content(type="text", text=json.dumps(response, indent=2, ensure_ascii=False, default=str))]
    
    @abstractmethod
    def get_schema_info(self) -> Dict[str, Any]:
        """
        Get schema information for this tool's operations.
        
        Returns:
            Dictionary with schema information
        """
        pass
