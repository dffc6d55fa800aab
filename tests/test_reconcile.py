"""Tests for classification, matching and the reconciliation pass."""

import pytest
from datetime import datetime, timedelta

from ad_reconcile.core.directory import DirectoryAccount
from ad_reconcile.core.errors import DirectoryUnavailableError
from ad_reconcile.hr.source import DataQualityIssue, EmployeeRecord
from ad_reconcile.reconcile.classifier import Classification, classify
from ad_reconcile.reconcile.date_window import DateRange
from ad_reconcile.reconcile.matching import AttributeMatcher, DisplayNameMatcher, build_matcher
from ad_reconcile.reconcile.pipeline import (
    RESULT_FIELDS,
    disable_accounts,
    format_summary,
    reconcile_hr_file,
    result_rows,
    run_reconciliation,
    select_terminated,
)

NOW = datetime(2026, 10, 19, 9, 0)


class FakeDirectory:
    """In-memory stand-in for Directory."""
    
    def __init__(self, accounts=(), fail=False, fail_disable=()):
        self.accounts = list(accounts)
        self.fail = fail
        self.fail_disable = set(fail_disable)
        self.queries = []
        self.disabled = []
    
    def find_users_by_display_name(self, display_name):
        return self.find_users_by_attribute('displayName', display_name)
    
    def find_users_by_attribute(self, attribute, value):
        self.queries.append((attribute, value))
        if self.fail:
            raise DirectoryUnavailableError("Directory query failed: server down")
        if attribute == 'displayName':
            return [a for a in self.accounts if a.display_name == value]
        return [a for a in self.accounts if a.attributes.get(attribute) == [value]]
    
    def disable_account(self, account):
        if account.distinguished_name in self.fail_disable:
            raise DirectoryUnavailableError("insufficientAccessRights")
        self.disabled.append(account.distinguished_name)
        return account.user_account_control | 2


def account(name, enabled=True, ou="Users", **attributes):
    return DirectoryAccount(
        display_name=name,
        enabled=enabled,
        distinguished_name=f"CN={name},OU={ou},DC=test,DC=local",
        user_account_control=512 if enabled else 514,
        attributes={key: [value] for key, value in attributes.items()},
    )


def terminated(first, last, days_ago=3, status="Terminated", employee_id=None):
    return EmployeeRecord(first, last, status, (NOW - timedelta(days=days_ago)).date(), employee_id=employee_id)


class TestClassify:
    
    def test_not_found(self):
        result = classify(terminated("John", "Smith"), [])
        assert result.classification is Classification.NOT_FOUND
        assert result.counted_accounts == []
    
    def test_enabled_wins_over_disabled(self):
        enabled = account("Jane Doe")
        disabled = account("Jane Doe", enabled=False, ou="Disabled")
        
        result = classify(terminated("Jane", "Doe"), [disabled, enabled])
        
        assert result.classification is Classification.NEEDS_DISABLING
        assert result.counted_accounts == [enabled]
        assert result.accounts == [disabled, enabled]
    
    def test_only_disabled(self):
        accounts = [account("Jane Doe", enabled=False), account("Jane Doe", enabled=False, ou="Old")]
        
        result = classify(terminated("Jane", "Doe"), accounts)
        
        assert result.classification is Classification.ALREADY_DISABLED
        assert result.counted_accounts == accounts


class TestMatching:
    
    def test_build_matcher(self):
        assert isinstance(build_matcher(None), DisplayNameMatcher)
        assert isinstance(build_matcher("displayName"), DisplayNameMatcher)
        matcher = build_matcher("employeeID")
        assert isinstance(matcher, AttributeMatcher)
        assert matcher.attribute == "employeeID"
    
    def test_attribute_matcher_uses_identifier(self):
        directory = FakeDirectory([account("Jane Q. Doe", employeeID="E100")])
        
        accounts = AttributeMatcher("employeeID").find_accounts(directory, terminated("Jane", "Doe", employee_id="E100"))
        
        assert [a.display_name for a in accounts] == ["Jane Q. Doe"]
        assert directory.queries == [("employeeID", "E100")]
    
    def test_attribute_matcher_falls_back_to_name(self):
        directory = FakeDirectory([account("Jane Doe")])
        matcher = AttributeMatcher("employeeID")
        
        without_id = matcher.find_accounts(directory, terminated("Jane", "Doe"))
        unmatched_id = matcher.find_accounts(directory, terminated("Jane", "Doe", employee_id="E999"))
        
        assert len(without_id) == 1
        assert len(unmatched_id) == 1
        assert directory.queries == [
            ("displayName", "Jane Doe"),
            ("employeeID", "E999"),
            ("displayName", "Jane Doe"),
        ]


class TestRunReconciliation:
    
    def test_enabled_account_in_window(self):
        directory = FakeDirectory([account("Jane Doe")])
        
        summary = run_reconciliation([terminated("Jane", "Doe")], directory, DateRange.LAST_WEEK, NOW)
        
        assert summary.total_processed == 1
        assert summary.needs_disabling_count == 1
        assert summary.already_disabled_count == 0
        assert summary.not_found_count == 0
    
    def test_outside_window(self):
        directory = FakeDirectory([account("Jane Doe")])
        
        summary = run_reconciliation([terminated("Jane", "Doe")], directory, DateRange.LAST_DAY, NOW)
        
        assert summary.total_processed == 0
        assert (summary.needs_disabling_count, summary.already_disabled_count, summary.not_found_count) == (0, 0, 0)
        assert directory.queries == []
    
    def test_missing_account(self):
        summary = run_reconciliation([terminated("John", "Smith")], FakeDirectory(), now=NOW)
        
        assert summary.not_found_count == 1
        assert summary.needs_disabling_count == 0
        assert summary.already_disabled_count == 0
    
    def test_counts_every_account(self):
        directory = FakeDirectory([
            account("Jane Doe"),
            account("Jane Doe", ou="Contractors"),
            account("Jane Doe", enabled=False, ou="Disabled"),
            account("Bob Ray", enabled=False),
            account("Bob Ray", enabled=False, ou="Old"),
        ])
        records = [terminated("Jane", "Doe"), terminated("Bob", "Ray"), terminated("Al", "Poe")]
        
        summary = run_reconciliation(records, directory, now=NOW)
        
        assert summary.total_processed == 3
        assert summary.needs_disabling_count == 2
        assert summary.already_disabled_count == 2
        assert summary.not_found_count == 1
    
    def test_only_terminated_records(self):
        directory = FakeDirectory([account("Jane Doe"), account("Ann Lee")])
        records = [
            terminated("Jane", "Doe"),
            terminated("Ann", "Lee", status="Active"),
            terminated("Kim", "Park", status="Leave"),
        ]
        
        summary = run_reconciliation(records, directory, now=NOW)
        
        assert summary.total_processed == 1
        assert directory.queries == [("displayName", "Jane Doe")]
    
    def test_repeated_name_is_queried_again(self):
        directory = FakeDirectory([account("Jane Doe")])
        
        summary = run_reconciliation([terminated("Jane", "Doe"), terminated("Jane", "Doe", days_ago=5)],
                                     directory, now=NOW)
        
        assert len(directory.queries) == 2
        assert summary.needs_disabling_count == 2
    
    def test_idempotent(self):
        directory = FakeDirectory([account("Jane Doe"), account("Bob Ray", enabled=False)])
        records = [terminated("Jane", "Doe"), terminated("Bob", "Ray"), terminated("Al", "Poe")]
        
        first = run_reconciliation(records, directory, DateRange.LAST_MONTH, NOW)
        second = run_reconciliation(records, directory, DateRange.LAST_MONTH, NOW)
        
        assert first.to_dict() == second.to_dict()
    
    def test_directory_failure_aborts(self):
        with pytest.raises(DirectoryUnavailableError):
            run_reconciliation([terminated("Jane", "Doe")], FakeDirectory(fail=True), now=NOW)
    
    def test_issues_are_carried(self):
        issue = DataQualityIssue(4, "Status Eff Date", "31/31/2026", "bad date")
        
        summary = run_reconciliation([], FakeDirectory(), now=NOW, issues=[issue])
        
        assert summary.issues == [issue]
        assert summary.to_dict()["data_quality_issues"][0]["row"] == 4
    
    def test_select_terminated_ignores_case(self):
        records = [terminated("A", "B", status="terminated"), terminated("C", "D", status="Terminated ")]
        assert [r.first_name for r in select_terminated(records)] == ["A"]


class TestRemediation:
    
    def test_disables_only_enabled_accounts(self):
        enabled = account("Jane Doe")
        disabled = account("Jane Doe", enabled=False, ou="Disabled")
        directory = FakeDirectory([enabled, disabled, account("Bob Ray", enabled=False)])
        summary = run_reconciliation([terminated("Jane", "Doe"), terminated("Bob", "Ray")], directory, now=NOW)
        
        disable_accounts(summary, directory)
        
        assert directory.disabled == [enabled.distinguished_name]
        assert summary.disabled_dns == [enabled.distinguished_name]
        assert summary.failed_dns == []
        assert summary.to_dict()["disabled"] == [enabled.distinguished_name]
    
    def test_failure_is_recorded_and_run_continues(self):
        first = account("Jane Doe")
        second = account("Bob Ray")
        directory = FakeDirectory([first, second], fail_disable=[first.distinguished_name])
        summary = run_reconciliation([terminated("Jane", "Doe"), terminated("Bob", "Ray", days_ago=4)],
                                     directory, now=NOW)
        
        disable_accounts(summary, directory)
        
        assert summary.failed_dns == [first.distinguished_name]
        assert summary.disabled_dns == [second.distinguished_name]


class TestReporting:
    
    def test_format_summary(self):
        directory = FakeDirectory([account("Jane Doe")])
        summary = run_reconciliation([terminated("Jane", "Doe"), terminated("John", "Smith")],
                                     directory, DateRange.LAST_WEEK, NOW)
        
        text = format_summary(summary)
        
        assert "Date range: LastWeek" in text
        assert "Total terminated employees processed: 2" in text
        assert "Accounts already disabled: 0" in text
        assert "Accounts that need disabling: 1" in text
        assert "Employees not found in directory: 1" in text
        assert "disabled this run" not in text
    
    def test_result_rows(self):
        directory = FakeDirectory([account("Jane Doe"), account("Jane Doe", enabled=False, ou="Old")])
        summary = run_reconciliation([terminated("Jane", "Doe"), terminated("John", "Smith")], directory, now=NOW)
        
        rows = result_rows(summary)
        
        assert len(rows) == 3
        assert rows[0]["Classification"] == "NeedsDisabling"
        assert rows[0]["SamAccountName"] == ""
        assert {row["Enabled"] for row in rows[:2]} == {True, False}
        assert rows[2] == {
            "FullName": "John Smith",
            "StatusEffDate": (NOW - timedelta(days=3)).date().isoformat(),
            "Classification": "NotFound",
            "SamAccountName": "",
            "Enabled": "",
            "DistinguishedName": "",
        }
        assert all(list(row) == RESULT_FIELDS for row in rows)


class TestReconcileHRFile:
    
    def test_end_to_end(self, tmp_path):
        effective = (NOW - timedelta(days=3)).strftime("%m/%d/%Y")
        path = tmp_path / "hr.csv"
        path.write_text(
            "First Name,Last Name,Status Type,Status Eff Date\n"
            f"Jane,Doe,Terminated,{effective}\n"
            "John,Smith,Terminated,not-a-date\n"
            f"Amy,Lee,Active,{effective}\n",
            encoding="utf-8"
        )
        directory = FakeDirectory([account("Jane Doe")])
        
        summary = reconcile_hr_file(str(path), directory, date_range="LastWeek", now=NOW, disable=True)
        
        assert summary.total_processed == 1
        assert summary.needs_disabling_count == 1
        assert len(summary.issues) == 1
        assert directory.disabled == ["CN=Jane Doe,OU=Users,DC=test,DC=local"]
        assert "Accounts disabled this run: 1" in format_summary(summary)
