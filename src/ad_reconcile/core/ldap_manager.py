"""LDAP connection manager for Active Directory."""

import ssl
import time
from typing import Optional, List, Dict, Any, Union

import ldap3
from ldap3 import Server, Connection, ALL, SUBTREE, ALL_ATTRIBUTES
from ldap3.core.exceptions import LDAPException, LDAPBindError, LDAPSocketOpenError

from ..config.models import ActiveDirectoryConfig, SecurityConfig, PerformanceConfig
from .logging import get_logger

logger = get_logger("ldap")

PAGED_RESULTS_OID = '1.2.840.113556.1.4.319'


class LDAPManager:
    """
    LDAP connection manager for Active Directory operations.
    
    Holds one lazily opened connection, fails over across the configured
    servers and retries binding a bounded number of times.
    """
    
    def __init__(self, 
                 ad_config: ActiveDirectoryConfig,
                 security_config: SecurityConfig,
                 performance_config: PerformanceConfig):
        """
        Initialize LDAP manager.
        
        Args:
            ad_config: Active Directory configuration
            security_config: Security configuration
            performance_config: Performance configuration
        """
        self.ad_config = ad_config
        self.security_config = security_config
        self.performance_config = performance_config
        
        self._connection: Optional[Connection] = None
        self._server_pool: List[Server] = []
        
        self._setup_servers()
        
    def _setup_servers(self) -> None:
        """Setup LDAP servers for failover."""
        tls_config = None
        if self.security_config.enable_tls:
            tls_config = ldap3.Tls(
                validate=ssl.CERT_REQUIRED if self.security_config.validate_certificate else ssl.CERT_NONE,
                ca_certs_file=self.security_config.ca_cert_file
            )
        
        urls = [self.ad_config.server] + list(self.ad_config.server_pool or [])
        self._server_pool = [
            Server(
                url,
                get_info=ALL,
                tls=tls_config,
                connect_timeout=self.ad_config.timeout
            )
            for url in urls
        ]
        logger.info(f"Configured {len(self._server_pool)} LDAP servers")
    
    def connect(self) -> Connection:
        """
        Establish LDAP connection with retry logic.
        
        Returns:
            Connection: Active LDAP connection
            
        Raises:
            LDAPException: If connection fails after all retries
        """
        if self._connection and self._connection.bound:
            return self._connection
        
        last_error = None
        attempts = self.performance_config.max_retries
        
        for attempt in range(attempts):
            for server in self._server_pool:
                try:
                    logger.debug(f"Attempting connection to {server.host}:{server.port}")
                    
                    connection = Connection(
                        server,
                        user=self.ad_config.bind_dn,
                        password=self.ad_config.password,
                        auto_bind=self.ad_config.auto_bind,
                        receive_timeout=self.ad_config.receive_timeout,
                        authentication=ldap3.SIMPLE,
                        check_names=True,
                        raise_exceptions=True
                    )
                    
                    if connection.bound or connection.bind():
                        self._connection = connection
                        logger.info(f"Successfully connected to {server.host}:{server.port}")
                        return connection
                    
                    logger.warning(f"Failed to bind to {server.host}:{server.port}")
                        
                except (LDAPSocketOpenError, LDAPBindError) as e:
                    logger.warning(f"Connection failed to {server.host}:{server.port}: {e}")
                    last_error = e
            
            if attempt < attempts - 1:
                logger.info(f"Retry {attempt + 1}/{attempts} after {self.performance_config.retry_delay}s")
                time.sleep(self.performance_config.retry_delay)
        
        error_msg = f"Failed to connect to any LDAP server after {attempts} attempts"
        if last_error:
            error_msg += f". Last error: {last_error}"
        
        logger.error(error_msg)
        raise LDAPException(error_msg)
    
    def disconnect(self) -> None:
        """Disconnect from LDAP server."""
        if self._connection:
            try:
                self._connection.unbind()
                logger.info("Disconnected from LDAP server")
            except LDAPException as e:
                logger.warning(f"Error during disconnect: {e}")
            finally:
                self._connection = None
    
    def search(self, 
               search_base: str,
               search_filter: str,
               attributes: Union[List[str], str] = ALL_ATTRIBUTES,
               search_scope: str = SUBTREE,
               size_limit: int = 0) -> List[Dict[str, Any]]:
        """
        Perform paged LDAP search operation.
        
        Every attribute value is returned as a list, so single-valued
        attributes are read with ``entry['attributes'].get(name, [default])[0]``.
        
        Args:
            search_base: Base DN for search
            search_filter: LDAP filter string
            attributes: Attributes to retrieve
            search_scope: Search scope (SUBTREE, LEVEL, BASE)
            size_limit: Maximum number of results (0 = no limit)
            
        Returns:
            List of LDAP entries as dictionaries with 'dn' and 'attributes'
            
        Raises:
            LDAPException: If search fails
        """
        connection = self.connect()
        
        logger.debug(f"Searching: base={search_base}, filter={search_filter}")
        
        paged_size = min(self.performance_config.page_size, size_limit) if size_limit > 0 else self.performance_config.page_size
        
        entries = []
        cookie = None
        
        while True:
            success = connection.search(
                search_base=search_base,
                search_filter=search_filter,
                search_scope=search_scope,
                attributes=attributes,
                paged_size=paged_size,
                paged_cookie=cookie
            )
            
            if not success:
                logger.error(f"Search failed: {connection.result}")
                raise LDAPException(f"Search failed: {connection.result}")
            
            for entry in connection.entries:
                entry_dict = {
                    'dn': entry.entry_dn,
                    'attributes': {}
                }
                
                for attr_name in entry.entry_attributes:
                    entry_dict['attributes'][attr_name] = list(entry[attr_name].values)
                
                entries.append(entry_dict)
                
                if size_limit > 0 and len(entries) >= size_limit:
                    logger.debug(f"Size limit reached: {size_limit}")
                    return entries[:size_limit]
            
            cookie = connection.result.get('controls', {}).get(PAGED_RESULTS_OID, {}).get('value', {}).get('cookie')
            if not cookie:
                break
        
        logger.debug(f"Search returned {len(entries)} entries")
        return entries
    
    def modify(self, dn: str, changes: Dict[str, Any]) -> bool:
        """
        Modify LDAP entry.
        
        Args:
            dn: Distinguished name of entry to modify
            changes: Dictionary of changes to apply
            
        Returns:
            True if successful
            
        Raises:
            LDAPException: If operation fails
        """
        connection = self.connect()
        
        logger.debug(f"Modifying entry: {dn}")
        
        if connection.modify(dn, changes):
            logger.info(f"Successfully modified entry: {dn}")
            return True
        
        logger.error(f"Failed to modify entry {dn}: {connection.result}")
        raise LDAPException(f"Modify operation failed: {connection.result}")
    
    def test_connection(self) -> Dict[str, Any]:
        """
        Test LDAP connection and return server information.
        
        Returns:
            Dictionary with connection test results
        """
        try:
            connection = self.connect()
        except LDAPException as e:
            logger.error(f"Connection test failed: {e}")
            return {
                'connected': False,
                'error': str(e)
            }
        
        server_info = {
            'connected': True,
            'server': connection.server.host,
            'port': connection.server.port,
            'ssl': connection.server.ssl,
            'bound': connection.bound,
            'user': connection.user
        }
        
        try:
            connection.search(
                search_base=self.ad_config.base_dn,
                search_filter='(objectClass=*)',
                search_scope=ldap3.BASE,
                attributes=['distinguishedName']
            )
            server_info['search_test'] = True
        except LDAPException as e:
            server_info['search_test'] = False
            server_info['search_error'] = str(e)
        
        logger.info("Connection test successful")
        return server_info
    
    def __enter__(self):
        """Context manager entry."""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
