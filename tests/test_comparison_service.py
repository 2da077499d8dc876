import pytest

from features.comparison.comparison_service import (
    ComparisonConfig,
    ComparisonReport,
    ComparisonService,
    Difference,
    DifferenceKind,
    compare_indexes,
    compare_trees,
    filter_differences,
)
from features.comparison.entry_indexer import NO_TITLE, index_entries
from features.vault.vault_service import VaultCredentials, VaultOpenError

from conftest import FakeEntry, FakeGroup


def compare(first_root, second_root):
    return compare_indexes(index_entries(first_root), index_entries(second_root))


class TestScenarios:
    def test_identical_entries_report_nothing(self, make_tree):
        first = make_tree(("Bank", "alice", "p1"))
        second = make_tree(("Bank", "alice", "p1"))
        assert compare(first, second) == []

    def test_username_difference(self, make_tree):
        first = make_tree(("Bank", "alice", "p1"))
        second = make_tree(("Bank", "bob", "p1"))

        assert compare(first, second) == [
            Difference(
                "Bank",
                "alice",
                DifferenceKind.USERNAME_DIFFERS,
                username1="alice",
                username2="bob",
            )
        ]

    def test_password_difference(self, make_tree):
        first = make_tree(("Bank", "alice", "p1"))
        second = make_tree(("Bank", "alice", "p2"))

        result = compare(first, second)

        assert result == [Difference("Bank", "alice", DifferenceKind.PASSWORD_DIFFERS)]
        assert result[0].username1 is None
        assert result[0].username2 is None

    def test_only_in_first(self, make_tree):
        first = make_tree(("Mail", None, None))
        second = make_tree()

        assert compare(first, second) == [
            Difference("Mail", "", DifferenceKind.ONLY_IN_FIRST)
        ]

    def test_entries_match_regardless_of_depth(self, make_tree):
        nested = make_tree(("Old", "x", None))
        first = make_tree(subgroups=[nested])
        second = make_tree(("Old", "x", None))

        assert compare(first, second) == []

    def test_depth_mismatch_still_compares_fields(self, make_tree):
        first = make_tree(subgroups=[make_tree(("Old", None, None))])
        second = make_tree(("Old", "x", None))

        assert compare(first, second) == [
            Difference(
                "Old", "", DifferenceKind.USERNAME_DIFFERS, username1="", username2="x"
            )
        ]

    def test_untitled_entries_are_matched_to_each_other(self, make_tree):
        first = make_tree((None, "a", "p"), ("", "b", "p"))
        second = make_tree((None, "b", "p"))

        # Only the second untitled entry of ``first`` survives indexing
        assert compare(first, second) == []


class TestLaws:
    def test_only_in_second_uses_second_username(self, make_tree):
        first = make_tree()
        second = make_tree(("Shop", "carol", "pw"))

        assert compare(first, second) == [
            Difference("Shop", "carol", DifferenceKind.ONLY_IN_SECOND)
        ]

    def test_absence_is_reported_once_per_key(self, make_tree):
        first = make_tree(("A", "u", "p"), ("Shared", "u", "p"))
        second = make_tree(("Shared", "u", "p"), ("B", "u", "p"))

        result = compare(first, second)

        assert [(d.title, d.kind) for d in result] == [
            ("A", DifferenceKind.ONLY_IN_FIRST),
            ("B", DifferenceKind.ONLY_IN_SECOND),
        ]

    def test_username_difference_hides_password_difference(self, make_tree):
        first = make_tree(("Bank", "alice", "p1"))
        second = make_tree(("Bank", "bob", "p2"))

        result = compare(first, second)

        assert len(result) == 1
        assert result[0].kind == DifferenceKind.USERNAME_DIFFERS

    def test_missing_and_empty_fields_are_equal(self, make_tree):
        first = make_tree(("Bank", None, None))
        second = make_tree(("Bank", "", ""))
        assert compare(first, second) == []

    def test_comparison_is_case_and_whitespace_sensitive(self, make_tree):
        first = make_tree(("Bank", "Alice", "p1"), ("Mail", "m", "secret"))
        second = make_tree(("Bank", "alice", "p1"), ("Mail", "m", "secret "))

        kinds = [d.kind for d in compare(first, second)]

        assert kinds == [
            DifferenceKind.USERNAME_DIFFERS,
            DifferenceKind.PASSWORD_DIFFERS,
        ]

    def test_titles_are_case_sensitive_keys(self, make_tree):
        result = compare(make_tree(("bank", "", "")), make_tree(("Bank", "", "")))
        assert [d.kind for d in result] == [
            DifferenceKind.ONLY_IN_FIRST,
            DifferenceKind.ONLY_IN_SECOND,
        ]

    def test_order_follows_traversal(self, make_tree):
        first = make_tree(
            ("C", "u", "1"), ("A", "u", "1"), subgroups=[make_tree(("B", "x", "1"))]
        )
        second = make_tree(("Z", "u", "1"), ("B", "y", "1"), ("Y", "u", "1"))

        assert [d.title for d in compare(first, second)] == ["C", "A", "B", "Z", "Y"]

    def test_repeated_runs_give_identical_output(self, make_tree):
        first = make_tree(("A", "u", "1"), ("B", "u", "1"), (None, "x", "y"))
        second = make_tree(("B", "v", "1"), ("C", "u", "1"))

        assert compare(first, second) == compare(first, second)

    def test_differences_never_carry_passwords(self, make_tree):
        first = make_tree(("Bank", "alice", "hunter2"))
        second = make_tree(("Bank", "alice", "correct horse"))

        (difference,) = compare(first, second)

        assert "hunter2" not in repr(difference)
        assert "correct horse" not in repr(difference)


class TestCompareTrees:
    def test_report_counts_all_entries(self, make_tree):
        first = make_tree(
            ("A", "u", "1"), ("A", "u", "2"), subgroups=[make_tree(("B", "u", "1"))]
        )
        second = make_tree(("A", "u", "2"))

        report = compare_trees(first, second)

        assert report.first_entry_count == 3
        assert report.second_entry_count == 1
        assert [(d.title, d.kind) for d in report.differences] == [
            ("B", DifferenceKind.ONLY_IN_FIRST)
        ]

    def test_status_message(self):
        report = ComparisonReport(
            differences=[Difference("A", "", DifferenceKind.ONLY_IN_FIRST)],
            first_entry_count=5,
            second_entry_count=4,
        )
        assert report.status_message() == (
            "Successfully compared databases!\n"
            "Database 1: 5 entries\n"
            "Database 2: 4 entries\n"
            "Differences found: 1"
        )

    def test_summary_counts_every_kind(self):
        report = ComparisonReport(
            differences=[
                Difference("A", "", DifferenceKind.ONLY_IN_FIRST),
                Difference("B", "", DifferenceKind.ONLY_IN_FIRST),
                Difference("C", "", DifferenceKind.PASSWORD_DIFFERS),
            ]
        )
        assert report.summary() == {
            DifferenceKind.ONLY_IN_FIRST: 2,
            DifferenceKind.ONLY_IN_SECOND: 0,
            DifferenceKind.USERNAME_DIFFERS: 0,
            DifferenceKind.PASSWORD_DIFFERS: 1,
        }


class TestFilterDifferences:
    @pytest.fixture
    def differences(self):
        return [
            Difference("Bank", "alice", DifferenceKind.PASSWORD_DIFFERS),
            Difference("Mail", "bob", DifferenceKind.ONLY_IN_FIRST),
            Difference("Banking App", "", DifferenceKind.ONLY_IN_SECOND),
            Difference(NO_TITLE, "", DifferenceKind.ONLY_IN_FIRST),
        ]

    def test_no_filter_keeps_everything(self, differences):
        assert filter_differences(differences) == differences

    def test_filter_by_kind(self, differences):
        result = filter_differences(differences, kind=DifferenceKind.ONLY_IN_FIRST)
        assert [d.title for d in result] == ["Mail", NO_TITLE]

    def test_substring_match_is_case_insensitive(self, differences):
        result = filter_differences(differences, pattern="BANK")
        assert [d.title for d in result] == ["Bank", "Banking App"]

    def test_glob_match(self, differences):
        result = filter_differences(differences, pattern="bank*")
        assert [d.title for d in result] == ["Bank", "Banking App"]
        assert filter_differences(differences, pattern="b?nk") == [differences[0]]

    def test_kind_and_pattern_combine(self, differences):
        result = filter_differences(
            differences, kind=DifferenceKind.ONLY_IN_SECOND, pattern="bank"
        )
        assert [d.title for d in result] == ["Banking App"]


class TestComparisonService:
    def test_config_completeness(self):
        complete = VaultCredentials("a.kdbx", "pw")
        keyfile_only = VaultCredentials("b.kdbx", keyfile="b.key")
        no_secret = VaultCredentials("c.kdbx")

        assert ComparisonConfig(complete, keyfile_only).is_complete
        assert not ComparisonConfig(complete, no_secret).is_complete
        assert not ComparisonConfig(VaultCredentials("", "pw"), complete).is_complete

    def test_compare_before_open_returns_none(self):
        assert ComparisonService().compare() is None

    def test_compare_vaults_uses_opened_trees(self, monkeypatch, make_tree):
        trees = {
            "one.kdbx": make_tree(("Bank", "alice", "p1")),
            "two.kdbx": make_tree(("Bank", "alice", "p2"), ("Mail", "", "")),
        }

        class FakeVault:
            def __init__(self, root_group):
                self.root_group = root_group

        monkeypatch.setattr(
            "features.vault.vault_service.open_vault",
            lambda credentials: FakeVault(trees[credentials.path]),
        )
        service = ComparisonService()

        report = service.compare_vaults(
            ComparisonConfig(
                VaultCredentials("one.kdbx", "pw"), VaultCredentials("two.kdbx", "pw")
            )
        )

        assert [d.kind for d in report.differences] == [
            DifferenceKind.PASSWORD_DIFFERS,
            DifferenceKind.ONLY_IN_SECOND,
        ]
        assert (report.first_entry_count, report.second_entry_count) == (1, 2)
        assert service.report is report
        assert not service.is_open

    def test_second_vault_failure_names_second(self, monkeypatch, make_tree):
        def fake_open(credentials):
            if credentials.path == "bad.kdbx":
                raise VaultOpenError(credentials.path, "Failed to open file: missing")
            return type("FakeVault", (), {"root_group": make_tree()})()

        monkeypatch.setattr("features.vault.vault_service.open_vault", fake_open)
        service = ComparisonService()

        with pytest.raises(VaultOpenError) as excinfo:
            service.compare_vaults(
                ComparisonConfig(
                    VaultCredentials("good.kdbx", "pw"),
                    VaultCredentials("bad.kdbx", "pw"),
                )
            )

        assert excinfo.value.which == "second"
        assert excinfo.value.cause == "Failed to open file: missing"
        assert not service.is_open
        assert service.report is None

    def test_first_vault_failure_skips_second(self, monkeypatch):
        opened = []

        def fake_open(credentials):
            opened.append(credentials.path)
            raise VaultOpenError(credentials.path, "Failed to decrypt database: x")

        monkeypatch.setattr("features.vault.vault_service.open_vault", fake_open)

        with pytest.raises(VaultOpenError) as excinfo:
            ComparisonService().compare_vaults(
                ComparisonConfig(
                    VaultCredentials("one.kdbx", "pw"), VaultCredentials("two.kdbx", "pw")
                )
            )

        assert excinfo.value.which == "first"
        assert opened == ["one.kdbx"]


class TestDifferencePayload:
    def test_username_difference_requires_both_usernames(self):
        with pytest.raises(ValueError):
            Difference("Bank", "alice", DifferenceKind.USERNAME_DIFFERS, username1="alice")
        with pytest.raises(ValueError):
            Difference("Bank", "alice", DifferenceKind.USERNAME_DIFFERS)

    def test_empty_usernames_are_a_valid_payload(self):
        difference = Difference(
            "Bank", "", DifferenceKind.USERNAME_DIFFERS, username1="", username2="x"
        )
        assert (difference.username1, difference.username2) == ("", "x")

    @pytest.mark.parametrize(
        "kind",
        [
            DifferenceKind.ONLY_IN_FIRST,
            DifferenceKind.ONLY_IN_SECOND,
            DifferenceKind.PASSWORD_DIFFERS,
        ],
    )
    def test_other_kinds_reject_usernames(self, kind):
        with pytest.raises(ValueError):
            Difference("Bank", "alice", kind, username1="alice")
        with pytest.raises(ValueError):
            Difference("Bank", "alice", kind, username2="bob")
