from docgate.domain.entities import number_rule, string_rule
from docgate.domain.services import apply_defaults, filter_by_props


class TestFilterByProps:
    def test_drops_keys_outside_allow_list(self):
        data = {"name": "A", "createdBy": "attacker", "isActive": False, "extra": 1}

        assert filter_by_props(data, ["name", "email"]) == {"name": "A"}

    def test_idempotent(self):
        data = {"name": "A", "extra": 1}
        once = filter_by_props(data, ["name"])

        assert filter_by_props(once, ["name"]) == once

    def test_does_not_mutate_input(self):
        data = {"name": "A", "extra": 1}
        filter_by_props(data, ["name"])

        assert data == {"name": "A", "extra": 1}


class TestApplyDefaults:
    def test_fills_absent_fields_only(self):
        rules = {"status": string_rule(default="draft"), "count": number_rule(default=0)}

        assert apply_defaults({"status": "live"}, rules) == {"status": "live", "count": 0}

    def test_none_means_no_default(self):
        assert apply_defaults({}, {"title": string_rule()}) == {}

    def test_present_falsy_value_kept(self):
        rules = {"count": number_rule(default=10)}

        assert apply_defaults({"count": 0}, rules) == {"count": 0}
