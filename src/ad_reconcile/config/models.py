"""Configuration models for AD reconcile."""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class ActiveDirectoryConfig(BaseModel):
    """Active Directory connection configuration."""
    
    server: str = Field(..., description="Primary LDAP server URL")
    server_pool: Optional[List[str]] = Field(default=None, description="Additional LDAP servers for redundancy")
    use_ssl: bool = Field(default=True, description="Use SSL/TLS connection")
    domain: str = Field(..., description="Active Directory domain")
    base_dn: str = Field(..., description="Base Distinguished Name")
    bind_dn: str = Field(..., description="Service account DN for binding")
    password: str = Field(..., description="Service account password")
    timeout: int = Field(default=30, description="Connection timeout in seconds")
    auto_bind: bool = Field(default=True, description="Automatically bind on connection")
    receive_timeout: int = Field(default=10, description="Receive timeout in seconds")
    
    @field_validator('server')
    @classmethod
    def validate_server(cls, v):
        """Validate server URL format."""
        if not v.startswith(('ldap://', 'ldaps://')):
            raise ValueError('Server must start with ldap:// or ldaps://')
        return v


class SecurityConfig(BaseModel):
    """Security configuration for LDAP connections."""
    
    enable_tls: bool = Field(default=True, description="Enable TLS encryption")
    validate_certificate: bool = Field(default=True, description="Validate server certificate")
    ca_cert_file: Optional[str] = Field(default=None, description="CA certificate file path")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    
    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format"
    )
    file: Optional[str] = Field(default=None, description="Log file path")
    transcript_dir: Optional[str] = Field(default=None, description="Directory for per-run transcript files")
    
    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Level must be one of: {valid_levels}')
        return v.upper()


class PerformanceConfig(BaseModel):
    """Performance configuration."""
    
    max_retries: int = Field(default=3, description="Maximum connection retries")
    retry_delay: float = Field(default=1.0, description="Retry delay in seconds")
    page_size: int = Field(default=1000, description="LDAP search page size")
    
    @field_validator('max_retries', 'page_size')
    @classmethod
    def validate_positive_int(cls, v):
        """Validate positive integers."""
        if v <= 0:
            raise ValueError('Value must be positive')
        return v
    
    @field_validator('retry_delay')
    @classmethod
    def validate_positive_float(cls, v):
        """Validate positive float."""
        if v <= 0:
            raise ValueError('Retry delay must be positive')
        return v


class HRSourceConfig(BaseModel):
    """HR export file layout."""
    
    path: Optional[str] = Field(default=None, description="Default HR export CSV path")
    first_name_column: str = Field(default="First Name")
    last_name_column: str = Field(default="Last Name")
    status_column: str = Field(default="Status Type")
    effective_date_column: str = Field(default="Status Eff Date")
    id_column: Optional[str] = Field(default=None, description="Column carrying an external employee identifier")
    date_format: str = Field(default="%m/%d/%Y", description="strptime format of the effective date")
    terminated_status: str = Field(default="Terminated", description="Status value marking a terminated employee")
    encoding: str = Field(default="utf-8-sig", description="File encoding")


class ReconciliationConfig(BaseModel):
    """Termination reconciliation defaults."""
    
    date_range: Optional[str] = Field(default=None, description="LastYear, LastQuarter, LastMonth, LastWeek, LastDay or unset for all")
    match_attribute: Optional[str] = Field(default=None, description="Directory attribute matched against the HR id column")
    disable_accounts: bool = Field(default=False, description="Disable enabled accounts of terminated employees")


class ReportsConfig(BaseModel):
    """Report output configuration."""
    
    output_dir: str = Field(default="reports", description="Directory CSV reports are written to")
    stale_days: int = Field(default=90, description="Days without logon before an account is stale")
    
    @field_validator('stale_days')
    @classmethod
    def validate_stale_days(cls, v):
        """Validate stale threshold."""
        if v <= 0:
            raise ValueError('stale_days must be positive')
        return v


class Config(BaseModel):
    """Main configuration class."""
    
    active_directory: ActiveDirectoryConfig
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)
    hr_source: HRSourceConfig = Field(default_factory=HRSourceConfig)
    reconciliation: ReconciliationConfig = Field(default_factory=ReconciliationConfig)
    reports: ReportsConfig = Field(default_factory=ReportsConfig)
