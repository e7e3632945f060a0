"""Tests for hard constraint evaluation."""

import logging
import math

import pytest
from pydantic import ValidationError

from conftest import make_city, make_metrics
from domain.scoring import Preferences, score_cities
from domain.scoring.constraints import filter_city, resolve_metric_value
from domain.scoring.models import HardConstraint, is_raw_metric_path


def _nfl():
    return HardConstraint(label="Must have an NFL team", kind="team", league="nfl")


class TestTeamConstraint:
    """League membership from the city's sports affiliations."""

    def test_city_with_team_passes(self):
        """A city with a team in the league passes."""
        city = make_city("a", sports_teams={"nfl": ["Anchors"]})
        assert filter_city(city, make_metrics(), [_nfl()]).excluded is False

    def test_city_without_team_fails(self):
        """A city with no team in the league is excluded with the label."""
        city = make_city("a", sports_teams={"nba": ["Hoopers"]})
        result = filter_city(city, make_metrics(), [_nfl()])
        assert result.excluded is True
        assert result.reason == "Must have an NFL team"

    def test_unknown_teams_fail_closed(self):
        """Unknown affiliations exclude the city."""
        result = filter_city(make_city("a"), make_metrics(), [_nfl()])
        assert result.excluded is True

    def test_blank_team_names_do_not_count(self):
        """Blank team names are not teams."""
        city = make_city("a", sports_teams={"nfl": ["  "]})
        assert filter_city(city, make_metrics(), [_nfl()]).excluded is True

    def test_unknown_league_is_rejected(self):
        """Leagues outside the known set fail validation."""
        with pytest.raises(ValidationError):
            HardConstraint(label="cricket", kind="team", league="ipl")


class TestMetricConstraint:
    """Comparisons against catalogue metrics or raw metric paths."""

    def test_catalogue_key_reads_raw_value(self):
        """A catalogue key compares on the raw value, not the score."""
        metrics = make_metrics(cost={"regional_price_parity": 96.0})
        assert resolve_metric_value("cost.price_parity", make_city("a"), metrics) == 96.0

    def test_raw_path(self):
        """A raw group.field path reads the leaf directly."""
        metrics = make_metrics(cost={"effective_tax_rate": 14.0})
        assert resolve_metric_value("cost.effective_tax_rate", make_city("a"), metrics) == 14.0

    @pytest.mark.parametrize(
        "operator,value,excluded",
        [
            ("<=", 100.0, False),
            ("<=", 95.0, True),
            ("<", 98.0, True),
            (">", 90.0, False),
            (">=", 99.0, True),
            ("==", 98.0, False),
            ("!=", 98.0, True),
        ],
    )
    def test_operators(self, operator, value, excluded):
        """Each comparison operator is applied to the raw value."""
        constraint = HardConstraint(
            label="Cost of living cap",
            kind="metric",
            metric="cost.price_parity",
            operator=operator,
            value=value,
        )
        metrics = make_metrics(cost={"regional_price_parity": 98.0})
        assert filter_city(make_city("a"), metrics, [constraint]).excluded is excluded

    def test_missing_metric_fails_closed(self):
        """A missing metric excludes the city."""
        constraint = HardConstraint(
            label="Cost of living at most 100",
            kind="metric",
            metric="cost.price_parity",
            operator="<=",
            value=100,
        )
        result = filter_city(make_city("a"), make_metrics(), [constraint])
        assert result.excluded is True
        assert result.reason == "Cost of living at most 100"

    def test_infinite_metric_fails_closed(self):
        """A non-finite metric counts as missing."""
        constraint = HardConstraint(
            label="Tax under 20", kind="metric", metric="cost.effective_tax_rate", operator="<", value=20
        )
        metrics = make_metrics(cost={"effective_tax_rate": -math.inf})
        assert filter_city(make_city("a"), metrics, [constraint]).excluded is True

    def test_unknown_metric_is_rejected(self):
        """Unknown metric paths fail validation."""
        with pytest.raises(ValidationError):
            HardConstraint(label="bad", kind="metric", metric="cost.unicorns", operator=">", value=1)

    def test_incomplete_metric_constraint_is_rejected(self):
        """A metric constraint needs an operator and value."""
        with pytest.raises(ValidationError):
            HardConstraint(label="bad", kind="metric", metric="cost.price_parity")


class TestKeyedMetricPaths:
    """Dict-valued leaves are addressed by key, never as a whole."""

    @pytest.mark.parametrize(
        "path", ["demographics.community_percent", "culture.religious_adherents"]
    )
    def test_whole_dict_leaf_is_rejected(self, path):
        """A bare dict-valued field is not a comparable metric."""
        assert is_raw_metric_path(path) is False
        with pytest.raises(ValidationError):
            HardConstraint(label="bad", kind="metric", metric=path, operator=">=", value=10)

    @pytest.mark.parametrize(
        "path",
        [
            "demographics.community_percent.hispanic",
            "culture.religious_adherents.catholic",
        ],
    )
    def test_keyed_path_is_accepted(self, path):
        """A group.field.key path into a dict leaf is valid."""
        assert is_raw_metric_path(path) is True

    @pytest.mark.parametrize(
        "path", ["cost.effective_tax_rate.extra", "cost.regional_price_parity.x", "demographics.community_percent."]
    )
    def test_malformed_keyed_path_is_rejected(self, path):
        """Keys only apply to dict-valued fields."""
        assert is_raw_metric_path(path) is False

    def test_keyed_path_reads_the_entry(self):
        """The keyed entry is compared; a missing key fails closed."""
        constraint = HardConstraint(
            label="Hispanic community at least 10%",
            kind="metric",
            metric="demographics.community_percent.hispanic",
            operator=">=",
            value=10,
        )
        large = make_metrics(demographics={"community_percent": {"hispanic": 24.0}})
        small = make_metrics(demographics={"community_percent": {"hispanic": 4.0}})
        unknown = make_metrics(demographics={"community_percent": {"asian": 12.0}})
        assert filter_city(make_city("a"), large, [constraint]).excluded is False
        assert filter_city(make_city("b"), small, [constraint]).excluded is True
        assert filter_city(make_city("c"), unknown, [constraint]).excluded is True

    def test_keyed_constraint_scores_without_error(self):
        """Scoring with a keyed constraint marks cities instead of raising."""
        constraint = HardConstraint(
            label="Catholic presence",
            kind="metric",
            metric="culture.religious_adherents.catholic",
            operator=">",
            value=100,
        )
        cities = [
            (make_city("a", "A"), make_metrics(culture={"religious_adherents": {"catholic": 250.0}})),
            (make_city("b", "B"), make_metrics()),
        ]
        scores = {s.city_id: s for s in score_cities(cities, Preferences(constraints=[constraint]))}
        assert scores["a"].excluded is False
        assert scores["b"].exclusion_reason == "Catholic presence"


class TestOtherConstraints:
    """Airport, state and predicate constraints."""

    def test_airport_required(self):
        """Only a known international airport passes."""
        constraint = HardConstraint(label="International airport", kind="airport")
        with_airport = make_city("a", has_international_airport=True)
        unknown = make_city("b")
        assert filter_city(with_airport, make_metrics(), [constraint]).excluded is False
        assert filter_city(unknown, make_metrics(), [constraint]).excluded is True

    def test_state_is_case_insensitive(self):
        """State codes match regardless of case."""
        constraint = HardConstraint(label="West coast", kind="state", states=["ca", "OR", "WA"])
        assert filter_city(make_city("a", state="CA"), make_metrics(), [constraint]).excluded is False
        assert filter_city(make_city("b", state="TX"), make_metrics(), [constraint]).excluded is True

    def test_empty_state_list_is_rejected(self):
        """A state constraint needs at least one state."""
        with pytest.raises(ValidationError):
            HardConstraint(label="nowhere", kind="state", states=[])

    def test_predicate_pass_and_fail(self):
        """Predicates decide inclusion from the city's metrics."""
        warm = HardConstraint(
            label="Warm winters",
            kind="predicate",
            predicate=lambda city, metrics: metrics.climate.avg_winter_temp > 45,
        )
        assert filter_city(
            make_city("a"), make_metrics(climate={"avg_winter_temp": 55}), [warm]
        ).excluded is False
        assert filter_city(
            make_city("b"), make_metrics(climate={"avg_winter_temp": 30}), [warm]
        ).excluded is True

    def test_predicate_error_fails_closed_and_logs(self, caplog):
        """A predicate that raises excludes the city and logs a warning."""
        warm = HardConstraint(
            label="Warm winters",
            kind="predicate",
            predicate=lambda city, metrics: metrics.climate.avg_winter_temp > 45,
        )
        with caplog.at_level(logging.WARNING, logger="domain.scoring.constraints"):
            result = filter_city(make_city("a"), make_metrics(), [warm])
        assert result.excluded is True
        assert result.reason == "Warm winters"
        assert "Warm winters" in caplog.text


class TestShortCircuit:
    """Only the first failing constraint is reported."""

    def test_first_failure_wins(self):
        """The first declared failure is the reason."""
        constraints = [
            HardConstraint(label="Pacific states", kind="state", states=["CA", "OR"]),
            _nfl(),
        ]
        result = filter_city(make_city("a", state="TX", sports_teams={}), make_metrics(), constraints)
        assert result.reason == "Pacific states"

    def test_passing_constraints_are_skipped(self):
        """Passing constraints do not stop evaluation."""
        constraints = [
            HardConstraint(label="Texas", kind="state", states=["TX"]),
            _nfl(),
        ]
        result = filter_city(make_city("a", state="TX", sports_teams={}), make_metrics(), constraints)
        assert result.reason == "Must have an NFL team"

    def test_no_constraints_never_excludes(self):
        """No constraints means no exclusion."""
        result = filter_city(make_city("a"), make_metrics(), [])
        assert result.excluded is False
        assert result.reason is None
