from covid_rollups.pipeline.geo_key import geoid_to_region_code


def test_geoid_to_region_code_extracts_county_code():
    assert geoid_to_region_code("840-04013") == "04013"
    assert geoid_to_region_code("USA-36061") == "36061"


def test_geoid_to_region_code_handles_missing_and_unhyphenated():
    assert geoid_to_region_code(None) is None
    assert geoid_to_region_code("04013") is None
    assert geoid_to_region_code(840) is None


def test_geoid_to_region_code_keeps_empty_and_second_segment():
    assert geoid_to_region_code("USA-") == ""
    assert geoid_to_region_code("USA-01-extra") == "01"
