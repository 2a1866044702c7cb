import pytest

from patriot_search.matching import classifier
from patriot_search.models import Provenance


def test_name_match_is_primary(make_business):
    record = make_business(name="Olive Garden Restaurant")
    assert classifier.classify(record, "Olive Garden") is Provenance.PRIMARY


def test_non_matching_name_is_nearby(make_business):
    record = make_business(name="Red Lobster")
    assert classifier.classify(record, "Olive Garden") is Provenance.NEARBY_DATABASE


def test_no_query_is_nearby(make_business):
    assert classifier.classify(make_business(name="Anything")) is Provenance.NEARBY_DATABASE
    assert classifier.classify(make_business(name="Anything"), "   ") is Provenance.NEARBY_DATABASE


def test_chain_overrides_name_match(make_business):
    record = make_business(name="McDonald's #4521", chain_id="mcd-001")
    assert classifier.classify(record, "McDonald's") is Provenance.CHAIN


def test_external_overrides_chain(make_business):
    record = make_business(name="McDonald's", chain_id="mcd-001", is_external=True)
    assert classifier.classify(record, "McDonald's") is Provenance.EXTERNAL_UNLISTED


def test_classify_is_idempotent(make_business):
    record = make_business(name="Olive Garden", chain_id=None)
    assert classifier.classify(record, "olive") == classifier.classify(record, "olive")


def test_classify_results_does_not_mutate_records(make_business):
    records = [make_business(id="1", name="Olive Garden"), make_business(id="2", name="Red Lobster")]
    before = [(r.id, r.name, r.chain_id, r.is_external) for r in records]

    results = classifier.classify_results(records, "olive garden")

    assert [r.provenance for r in results] == [Provenance.PRIMARY, Provenance.NEARBY_DATABASE]
    assert results[0].record is records[0]
    assert [(r.id, r.name, r.chain_id, r.is_external) for r in records] == before


@pytest.mark.parametrize("provenance", list(Provenance))
def test_every_provenance_has_a_marker_color(provenance):
    assert classifier.marker_color(provenance).startswith("#")
