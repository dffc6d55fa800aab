"""Directory inventory and stale-account reports."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from ..core.directory import (
    Directory,
    dn_depth,
    filetime_to_datetime,
    first_value,
    is_enabled,
    parent_container,
)
from ..core.logging import get_logger

logger = get_logger("inventory")

USER_FIELDS = ['SamAccountName', 'DisplayName', 'GivenName', 'Surname', 'Mail',
               'Enabled', 'ParentContainer', 'DistinguishedName', 'WhenCreated']
GROUP_FIELDS = ['Name', 'Description', 'GroupScope', 'GroupCategory', 'MemberCount',
                'ParentContainer', 'DistinguishedName']
OU_FIELDS = ['Name', 'Description', 'Depth', 'ParentContainer', 'DistinguishedName']
STALE_FIELDS = ['SamAccountName', 'DisplayName', 'LastLogon', 'DaysInactive',
                'ParentContainer', 'DistinguishedName']


def _format_time(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value) if value is not None else ''


def group_scope(group_type: int) -> str:
    """Get group scope from groupType value."""
    if group_type & 0x00000002:
        return "Global"
    if group_type & 0x00000004:
        return "DomainLocal"
    if group_type & 0x00000008:
        return "Universal"
    return "Unknown"


def group_category(group_type: int) -> str:
    """Get group category from groupType value."""
    return "Security" if group_type & 0x80000000 else "Distribution"


def user_inventory(directory: Directory, search_base: Optional[str] = None) -> List[Dict[str, Any]]:
    """One row per user account under ``search_base`` (the base DN by default)."""
    entries = directory.list_users(
        ['sAMAccountName', 'displayName', 'givenName', 'sn', 'mail',
         'userAccountControl', 'whenCreated'],
        search_base=search_base
    )
    
    rows = []
    for entry in entries:
        attributes = entry['attributes']
        rows.append({
            'SamAccountName': first_value(attributes, 'sAMAccountName', ''),
            'DisplayName': first_value(attributes, 'displayName', ''),
            'GivenName': first_value(attributes, 'givenName', ''),
            'Surname': first_value(attributes, 'sn', ''),
            'Mail': first_value(attributes, 'mail', ''),
            'Enabled': is_enabled(first_value(attributes, 'userAccountControl', 0)),
            'ParentContainer': parent_container(entry['dn']),
            'DistinguishedName': entry['dn'],
            'WhenCreated': _format_time(first_value(attributes, 'whenCreated')),
        })
    
    rows.sort(key=lambda row: str(row['SamAccountName']).lower())
    logger.info(f"User inventory: {len(rows)} accounts")
    return rows


def group_inventory(directory: Directory, search_base: Optional[str] = None) -> List[Dict[str, Any]]:
    """One row per group under ``search_base``."""
    entries = directory.list_groups(['name', 'description', 'groupType', 'member'], search_base=search_base)
    
    rows = []
    for entry in entries:
        attributes = entry['attributes']
        group_type = int(first_value(attributes, 'groupType', 0) or 0)
        rows.append({
            'Name': first_value(attributes, 'name', ''),
            'Description': first_value(attributes, 'description', ''),
            'GroupScope': group_scope(group_type),
            'GroupCategory': group_category(group_type),
            'MemberCount': len(attributes.get('member') or []),
            'ParentContainer': parent_container(entry['dn']),
            'DistinguishedName': entry['dn'],
        })
    
    rows.sort(key=lambda row: str(row['Name']).lower())
    logger.info(f"Group inventory: {len(rows)} groups")
    return rows


def ou_inventory(directory: Directory, search_base: Optional[str] = None) -> List[Dict[str, Any]]:
    """One row per organizational unit, parents before children."""
    base = search_base or directory.base_dn
    entries = directory.list_organizational_units(['name', 'description'], search_base=base)
    
    rows = []
    for entry in entries:
        attributes = entry['attributes']
        rows.append({
            'Name': first_value(attributes, 'name', ''),
            'Description': first_value(attributes, 'description', ''),
            'Depth': dn_depth(entry['dn'], base),
            'ParentContainer': parent_container(entry['dn']),
            'DistinguishedName': entry['dn'],
        })
    
    rows.sort(key=lambda row: (row['Depth'], str(row['Name']).lower()))
    logger.info(f"OU inventory: {len(rows)} organizational units")
    return rows


def stale_accounts(directory: Directory, days: int = 90, now: Optional[datetime] = None,
                   search_base: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Enabled users whose last logon is older than ``days`` or who never logged on.
    
    Uses lastLogonTimestamp, which is replicated but may lag by up to two
    weeks. Rows are sorted most inactive first; never-logged-on accounts lead.
    """
    if days <= 0:
        raise ValueError(f"days must be a positive number, got {days}")
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    cutoff = now - timedelta(days=days)
    
    entries = directory.list_users(
        ['sAMAccountName', 'displayName', 'lastLogonTimestamp', 'userAccountControl'],
        search_base=search_base,
        extra_filter="(!(userAccountControl:1.2.840.113556.1.4.803:=2))"
    )
    
    rows = []
    for entry in entries:
        attributes = entry['attributes']
        if not is_enabled(first_value(attributes, 'userAccountControl', 0)):
            continue
        
        last_logon = filetime_to_datetime(first_value(attributes, 'lastLogonTimestamp'))
        if last_logon is not None and last_logon >= cutoff:
            continue
        
        rows.append({
            'SamAccountName': first_value(attributes, 'sAMAccountName', ''),
            'DisplayName': first_value(attributes, 'displayName', ''),
            'LastLogon': last_logon.isoformat() if last_logon else 'Never',
            'DaysInactive': (now - last_logon).days if last_logon else None,
            'ParentContainer': parent_container(entry['dn']),
            'DistinguishedName': entry['dn'],
        })
    
    rows.sort(key=lambda row: float('inf') if row['DaysInactive'] is None else row['DaysInactive'], reverse=True)
    logger.info(f"Stale accounts (>{days} days): {len(rows)}")
    return rows
