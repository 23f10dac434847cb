"""
Unit tests for the eligibility evaluator.
"""

import pytest

from service_eligibility.app.rules.engine import (
    evaluate_event_access, is_event_permitted, is_golf_eligible, permitted_events, granted_rules
)
from service_eligibility.app.rules.models import (
    Delegate, Event, GolfDay, GrantType, Package, Rule,
    load_package_catalog, load_rule_catalog
)
from service_eligibility.app.registry.seed import DEFAULT_CATEGORY_RULES, DEFAULT_PACKAGES, DEFAULT_SCHEDULE


class TestEventPermission:
    """Test cases for is_event_permitted / evaluate_event_access."""

    @pytest.fixture
    def rules(self):
        """Int category with one linked pass and a golf rule."""
        return {
            "Int": [
                Rule(id="int_pass_30", name="All Access Day Pass", date="30 Mar 2026", linked_events=["E13", "E14"]),
                Rule(id="int_day1_golf", name="Day 1 Golf", date="30 Mar 2026", golf_type=GolfDay.DAY1),
                Rule(id="int_day2_golf", name="Day 2 Golf", date="31 Mar 2026", golf_type=GolfDay.DAY2),
            ]
        }

    @pytest.fixture
    def packages(self):
        return {
            "G3": Package(code="G3", category="Int", permissions={"int_pass_30": True, "int_day1_golf": True}),
            "N1": Package(code="N1", category="Int", permissions={"Dinner": True, "int_pass_30": False}),
        }

    @pytest.fixture
    def golf_event(self):
        return Event(id="E13", date="30.03.2026", time="08:00 AM", title="Golf Tournament Day 1",
                     permission_id="Golf", category="Golf")

    @pytest.fixture
    def dinner_event(self):
        return Event(id="E11", date="29.03.2026", time="07:00 PM", title="Welcoming Dinner",
                     permission_id="Dinner", category="Dinner")

    def test_unknown_package_denied(self, golf_event, packages, rules):
        """Test a dangling package reference grants nothing."""
        delegate = Delegate(id="D1", name="Ghost", package="DELETED")

        assert is_event_permitted(delegate, golf_event, packages, rules) is False
        result = evaluate_event_access(delegate, golf_event, packages, rules)
        assert result.reason == "Package not found"
        assert result.matched_rules == []

    def test_empty_package_denied(self, golf_event, packages, rules):
        """Test a delegate without a package is denied."""
        delegate = Delegate(id="D1", name="Nobody", package="")

        assert is_event_permitted(delegate, golf_event, packages, rules) is False

    def test_direct_grant(self, dinner_event, packages):
        """Test direct permission id grant ignores the rule catalog."""
        delegate = Delegate(id="D2", name="Diner", package="N1")

        result = evaluate_event_access(delegate, dinner_event, packages, {})

        assert result.allowed is True
        assert result.grant_type == GrantType.DIRECT
        assert result.matched_rules == ["Dinner"]

    def test_linked_itinerary_grant(self, golf_event, packages, rules):
        """Test a granted rule linking the event admits the delegate."""
        delegate = Delegate(id="D3", name="Golfer", package="G3")

        result = evaluate_event_access(delegate, golf_event, packages, rules)

        assert result.allowed is True
        assert result.grant_type == GrantType.LINKED
        assert result.matched_rules == ["int_pass_30"]

    def test_ungranted_linked_rule_denied(self, golf_event, packages, rules):
        """Test a linking rule the package does not grant is ignored."""
        delegate = Delegate(id="D2", name="Diner", package="N1")

        assert is_event_permitted(delegate, golf_event, packages, rules) is False

    def test_negative_case(self, packages, rules):
        """Test neither direct nor linked grant denies."""
        delegate = Delegate(id="D3", name="Golfer", package="G3")
        event = Event(id="E21", title="Farewell & Awards Night", permission_id="Dinner")

        result = evaluate_event_access(delegate, event, packages, rules)

        assert result.allowed is False
        assert "does not grant" in result.reason

    def test_empty_permission_id_only_matches_linked(self, packages, rules):
        """Test an event without permission id is reachable only through links."""
        delegate = Delegate(id="D3", name="Golfer", package="G3")
        linked = Event(id="E14", title="APDC Training & Forum", permission_id="")
        unlinked = Event(id="E99", title="Pop-up", permission_id="")
        packages["G3"].permissions[""] = True

        assert is_event_permitted(delegate, linked, packages, rules) is True
        assert is_event_permitted(delegate, unlinked, packages, rules) is False

    def test_category_missing_from_rule_catalog(self, golf_event, packages, rules):
        """Test a package whose category has no rule list fails closed."""
        packages["G3"].category = "VIP"
        delegate = Delegate(id="D3", name="Golfer", package="G3")

        assert is_event_permitted(delegate, golf_event, packages, rules) is False

    def test_dangling_permission_keys_ignored(self, golf_event, rules):
        """Test keys of deleted rules do not count as linked grants."""
        packages = {"G3": Package(code="G3", category="Int", permissions={"int_removed": True})}
        delegate = Delegate(id="D3", name="Golfer", package="G3")

        assert is_event_permitted(delegate, golf_event, packages, rules) is False

    def test_scalar_linked_itinerary_normalized(self, golf_event):
        """Test a bare-string linkedItinerary matches like a one-element list."""
        delegate = Delegate(id="D3", name="Golfer", package="G3")
        packages = load_package_catalog({"G3": {"category": "Int", "permissions": {"r1": True}}})
        scalar = load_rule_catalog({"Int": [{"id": "r1", "name": "Pass", "linkedItinerary": "E13"}]})
        listed = load_rule_catalog({"Int": [{"id": "r1", "name": "Pass", "linkedItinerary": ["E13"]}]})

        assert scalar["Int"][0].linked_events == ["E13"]
        assert is_event_permitted(delegate, golf_event, packages, scalar) is True
        assert is_event_permitted(delegate, golf_event, packages, listed) is True

    def test_malformed_inputs_never_raise(self, golf_event, packages, rules):
        """Test missing inputs degrade to a denial."""
        delegate = Delegate(id="D3", name="Golfer", package="G3")

        assert is_event_permitted(None, golf_event, packages, rules) is False
        assert is_event_permitted(delegate, None, packages, rules) is False
        assert is_event_permitted(delegate, golf_event, None, None) is False

    def test_reflects_latest_catalog(self, golf_event, packages, rules):
        """Test a catalog edit is visible to the next evaluation."""
        delegate = Delegate(id="D3", name="Golfer", package="G3")
        assert is_event_permitted(delegate, golf_event, packages, rules) is True

        packages["G3"].permissions["int_pass_30"] = False

        assert is_event_permitted(delegate, golf_event, packages, rules) is False

    def test_granted_rules(self, packages, rules):
        """Test granted_rules lists only granted rules of the category."""
        ids = [rule.id for rule in granted_rules(packages["G3"], rules)]

        assert ids == ["int_pass_30", "int_day1_golf"]


class TestGolfEligibility:
    """Test cases for is_golf_eligible."""

    @pytest.fixture
    def rules(self):
        return {
            "JCIM": [
                Rule(id="my_day1_golf", name="Day 1 Golf", golf_type=GolfDay.DAY1),
                Rule(id="my_day2_golf", name="Day 2 Golf", golf_type=GolfDay.DAY2),
                Rule(id="my_gala", name="GALA Night"),
            ]
        }

    @pytest.fixture
    def packages(self):
        return {
            "2nd Day Golfer": Package(code="2nd Day Golfer", category="JCIM",
                                      permissions={"my_day1_golf": False, "my_day2_golf": True, "my_gala": True}),
        }

    def test_non_participant_never_qualifies(self, packages, rules):
        """Test the golf participation flag gates both days."""
        delegate = Delegate(id="D1", name="Spectator", package="2nd Day Golfer", is_golf_participant=False)

        assert is_golf_eligible(delegate, 1, packages, rules) is False
        assert is_golf_eligible(delegate, 2, packages, rules) is False

    def test_participant_qualifies_for_granted_day(self, packages, rules):
        """Test eligibility follows the day-tagged rule grants."""
        delegate = Delegate(id="D1", name="Player", package="2nd Day Golfer", is_golf_participant=True)

        assert is_golf_eligible(delegate, 1, packages, rules) is False
        assert is_golf_eligible(delegate, 2, packages, rules) is True

    def test_invalid_day(self, packages, rules):
        """Test days other than 1 and 2 never qualify."""
        delegate = Delegate(id="D1", name="Player", package="2nd Day Golfer", is_golf_participant=True)

        assert is_golf_eligible(delegate, 3, packages, rules) is False

    def test_unknown_package(self, rules):
        """Test an unknown package fails closed for golf too."""
        delegate = Delegate(id="D1", name="Player", package="Missing", is_golf_participant=True)

        assert is_golf_eligible(delegate, 1, {}, rules) is False


class TestDefaultCatalog:
    """End-to-end checks against the seeded conference catalog."""

    @pytest.fixture
    def catalogs(self):
        return load_package_catalog(DEFAULT_PACKAGES), load_rule_catalog(DEFAULT_CATEGORY_RULES)

    @pytest.fixture
    def events(self):
        return {e["id"]: Event.from_dict(e) for e in DEFAULT_SCHEDULE}

    def test_g3_permitted_for_golf_day1(self, catalogs, events):
        """Test G3 reaches E13 through int_pass_30 though 'Golf' is never granted."""
        packages, rules = catalogs
        delegate = Delegate(id="G3-0001-INT", name="Alex Lim", package="G3")
        event = events["E13"]

        assert event.permission_id == "Golf"
        assert packages["G3"].grants("Golf") is False
        assert is_event_permitted(delegate, event, packages, rules) is True

    def test_permitted_events_for_jp_package(self, catalogs, events):
        """Test a package in a category without rules sees nothing."""
        packages, rules = catalogs
        delegate = Delegate(id="G3jp-0001-JP", name="Tanaka Kenji", package="G3jp")

        assert permitted_events(delegate, events.values(), packages, rules) == []

    def test_permitted_events_preserve_order(self, catalogs, events):
        """Test the guest itinerary filter keeps input order."""
        packages, rules = catalogs
        delegate = Delegate(id="W1", name="Welcome Only", package="Welcome Dinner")
        packages["Welcome Dinner"].permissions = {"my_welcome": True}

        allowed = permitted_events(delegate, events.values(), packages, rules)

        assert [e.id for e in allowed] == ["E11"]


class TestRecordLoading:
    """Test cases for building records from stored documents."""

    def test_null_delegate_fields_load_as_empty(self):
        """Test stored nulls become empty strings, not the text 'None'."""
        delegate = Delegate.from_dict({
            "id": "D1", "name": "Alex Lim", "package": None, "gender": None,
            "position": None, "country": None, "email": None, "phone": None,
            "localOrg": None, "nameOnTag": None,
        })

        assert delegate.package == ""
        assert delegate.gender == ""
        assert delegate.position == ""
        assert delegate.country == ""
        assert delegate.email == ""
        assert delegate.phone == ""
        assert delegate.local_org == ""
        assert delegate.name_on_tag == ""

    def test_null_event_fields_load_as_empty(self):
        event = Event.from_dict({"id": "E1", "title": None, "location": None, "permissionId": None})

        assert event.title == ""
        assert event.location == ""
        assert event.permission_id == ""

    def test_null_package_is_denied(self):
        """Test a delegate stored with a null package fails closed."""
        delegate = Delegate.from_dict({"id": "D1", "name": "Alex Lim", "package": None})
        packages = {"None": Package(code="None", category="Int", permissions={"Golf": True})}
        event = Event(id="E13", permission_id="Golf")

        assert is_event_permitted(delegate, event, packages, {}) is False
