"""Directory queries used by the reconciliation pass and the reports."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from ldap3 import MODIFY_REPLACE
from ldap3.core.exceptions import LDAPException
from ldap3.utils.conv import escape_filter_chars

from .errors import DirectoryUnavailableError
from .ldap_manager import LDAPManager
from .logging import get_logger, log_ldap_operation

logger = get_logger("directory")

ACCOUNTDISABLE = 0x0002
USER_FILTER = "(&(objectCategory=person)(objectClass=user))"

ACCOUNT_ATTRIBUTES = ['displayName', 'sAMAccountName', 'userAccountControl', 'distinguishedName']

FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)


@dataclass
class DirectoryAccount:
    """A user account as returned by the directory."""
    display_name: str
    enabled: bool
    distinguished_name: str
    sam_account_name: str = ""
    user_account_control: int = 0
    attributes: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def parent_container(self) -> str:
        return parent_container(self.distinguished_name)


def first_value(attributes: Dict[str, Any], name: str, default: Any = None) -> Any:
    """Return the first value of a (list valued) attribute."""
    values = attributes.get(name)
    if values is None:
        return default
    if isinstance(values, (list, tuple)):
        return values[0] if values else default
    return values


def is_enabled(uac_value: Optional[int]) -> bool:
    """Check if an account is enabled based on userAccountControl."""
    return not bool(int(uac_value or 0) & ACCOUNTDISABLE)


def split_dn(dn: str) -> List[str]:
    """
    Split a distinguished name into its RDNs.
    
    Commas escaped with a backslash stay inside their RDN, so
    ``CN=Doe\\, Jane,OU=Users`` yields ``['CN=Doe\\, Jane', 'OU=Users']``.
    """
    parts = []
    current = []
    escaped = False
    for char in dn:
        if escaped:
            current.append(char)
            escaped = False
        elif char == '\\':
            current.append(char)
            escaped = True
        elif char == ',':
            parts.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
    if current or parts:
        parts.append(''.join(current).strip())
    return [part for part in parts if part]


def parent_container(dn: str) -> str:
    """Return the DN of the container holding ``dn``."""
    return ','.join(split_dn(dn)[1:])


def dn_depth(dn: str, base_dn: str) -> int:
    """Count the RDN levels of ``dn`` below ``base_dn``."""
    depth = len(split_dn(dn)) - len(split_dn(base_dn))
    return max(depth, 0)


def filetime_to_datetime(value: Any) -> Optional[datetime]:
    """
    Convert a Windows FILETIME (or an already decoded datetime) to an aware datetime.
    
    Zero, the "never" sentinel and values before 1602 return None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        result = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    else:
        filetime = int(value)
        if filetime <= 0 or filetime >= 0x7FFFFFFFFFFFFFFF:
            return None
        result = FILETIME_EPOCH + timedelta(microseconds=filetime // 10)
    if result.year <= 1601:
        return None
    return result


def datetime_to_filetime(dt: datetime) -> int:
    """Convert datetime to Windows FILETIME."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - FILETIME_EPOCH
    return (delta.days * 86400 + delta.seconds) * 10000000 + delta.microseconds * 10


def to_account(entry: Dict[str, Any]) -> DirectoryAccount:
    """Build a DirectoryAccount from a search result entry."""
    attributes = entry['attributes']
    uac = int(first_value(attributes, 'userAccountControl', 0) or 0)
    return DirectoryAccount(
        display_name=first_value(attributes, 'displayName', '') or '',
        enabled=is_enabled(uac),
        distinguished_name=entry['dn'],
        sam_account_name=first_value(attributes, 'sAMAccountName', '') or '',
        user_account_control=uac,
        attributes=attributes,
    )


class Directory:
    """
    Read and disable user accounts through an LDAPManager.
    
    Every LDAP failure surfaces as DirectoryUnavailableError.
    """

    def __init__(self, ldap_manager: LDAPManager):
        self.ldap = ldap_manager
        self.base_dn = ldap_manager.ad_config.base_dn

    def _search(self, search_filter: str, attributes: List[str],
                search_base: Optional[str] = None) -> List[Dict[str, Any]]:
        base = search_base or self.base_dn
        try:
            return self.ldap.search(
                search_base=base,
                search_filter=search_filter,
                attributes=attributes
            )
        except LDAPException as e:
            log_ldap_operation("search", base, False, str(e))
            raise DirectoryUnavailableError(f"Directory query failed: {e}") from e

    def find_users_by_display_name(self, display_name: str) -> List[DirectoryAccount]:
        """Return every user account whose displayName equals ``display_name``."""
        return self.find_users_by_attribute('displayName', display_name)

    def find_users_by_attribute(self, attribute: str, value: str) -> List[DirectoryAccount]:
        """Return every user account whose ``attribute`` equals ``value``."""
        search_filter = f"(&{USER_FILTER}({attribute}={escape_filter_chars(value)}))"
        attributes = list(ACCOUNT_ATTRIBUTES)
        if attribute not in attributes:
            attributes.append(attribute)
        
        results = self._search(search_filter, attributes)
        accounts = [to_account(entry) for entry in results]
        logger.debug(f"{attribute}={value!r} matched {len(accounts)} account(s)")
        return accounts

    def list_users(self, attributes: List[str], search_base: Optional[str] = None,
                   extra_filter: str = "") -> List[Dict[str, Any]]:
        search_filter = f"(&{USER_FILTER}{extra_filter})" if extra_filter else USER_FILTER
        return self._search(search_filter, attributes, search_base)

    def list_groups(self, attributes: List[str], search_base: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._search("(objectClass=group)", attributes, search_base)

    def list_organizational_units(self, attributes: List[str],
                                  search_base: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._search("(objectClass=organizationalUnit)", attributes, search_base)

    def disable_account(self, account: DirectoryAccount) -> int:
        """
        Set ACCOUNTDISABLE on ``account``.
        
        Returns:
            The new userAccountControl value
            
        Raises:
            DirectoryUnavailableError: If the modify fails
        """
        new_uac = account.user_account_control | ACCOUNTDISABLE
        try:
            self.ldap.modify(account.distinguished_name, {
                'userAccountControl': [(MODIFY_REPLACE, [new_uac])]
            })
        except LDAPException as e:
            log_ldap_operation("disable_account", account.distinguished_name, False, str(e))
            raise DirectoryUnavailableError(f"Could not disable {account.distinguished_name}: {e}") from e
        
        log_ldap_operation("disable_account", account.distinguished_name, True,
                           f"userAccountControl={new_uac}")
        return new_uac
