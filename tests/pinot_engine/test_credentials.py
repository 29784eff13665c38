import copy

import pytest

from src.pinot_engine.credentials import build_jaas_config, inject_jaas_config
from src.pinot_engine.documents import redact_secret
from src.pinot_engine.errors import IncompleteCredentialsError

SECRET = "sasl.jaas.config"
JAAS = build_jaas_config("u", "p")


def stream_ingestion(document: dict) -> dict:
    return document["ingestionConfig"]["streamIngestionConfig"]


# ---------- build_jaas_config ----------


def test_build_renders_scram_template():
    assert JAAS == (
        "org.apache.kafka.common.security.scram.ScramLoginModule required "
        'username="u" password="p";'
    )
    assert 'username="u"' in JAAS and 'password="p"' in JAAS


@pytest.mark.parametrize("username, password", [(None, None), ("", ""), (None, ""), ("", None)])
def test_build_returns_none_without_credentials(username, password):
    assert build_jaas_config(username, password) is None


@pytest.mark.parametrize(
    "username, password", [("u", ""), ("u", None), ("", "p"), (None, "p")]
)
def test_build_requires_both_values(username, password):
    with pytest.raises(IncompleteCredentialsError, match="provided together"):
        build_jaas_config(username, password)


@pytest.mark.parametrize("username, password", [("  ", "p"), ("u", "\t")])
def test_build_rejects_blank_values(username, password):
    with pytest.raises(IncompleteCredentialsError, match="non-empty"):
        build_jaas_config(username, password)


def test_build_does_not_escape_quotes():
    # Known limitation: values are embedded verbatim.
    assert 'password="a"b";' in build_jaas_config("u", 'a"b')


# ---------- inject_jaas_config ----------


def test_inject_creates_missing_structure_as_one_element_list():
    payload = inject_jaas_config({"tableName": "t_REALTIME"}, JAAS)
    assert stream_ingestion(payload)["streamConfigMaps"] == [{SECRET: JAAS}]


def test_inject_replaces_non_mapping_ingestion_config():
    payload = inject_jaas_config({"ingestionConfig": "oops"}, JAAS)
    assert stream_ingestion(payload) == {"streamConfigMaps": [{SECRET: JAAS}]}


def test_inject_sets_key_in_mapping_shape():
    document = {
        "ingestionConfig": {"streamIngestionConfig": {"streamConfigMaps": {"streamType": "kafka"}}}
    }
    payload = inject_jaas_config(document, JAAS)
    assert stream_ingestion(payload)["streamConfigMaps"] == {"streamType": "kafka", SECRET: JAAS}


def test_inject_sets_key_on_first_list_element_only():
    document = {
        "ingestionConfig": {
            "streamIngestionConfig": {"streamConfigMaps": [{"n": 1}, {"n": 2}]}
        }
    }
    payload = inject_jaas_config(document, JAAS)
    assert stream_ingestion(payload)["streamConfigMaps"] == [{"n": 1, SECRET: JAAS}, {"n": 2}]


def test_inject_replaces_non_mapping_first_element():
    document = {"ingestionConfig": {"streamIngestionConfig": {"streamConfigMaps": ["x", {"n": 2}]}}}
    payload = inject_jaas_config(document, JAAS)
    assert stream_ingestion(payload)["streamConfigMaps"] == [{SECRET: JAAS}, {"n": 2}]


def test_inject_fills_empty_list():
    document = {"ingestionConfig": {"streamIngestionConfig": {"streamConfigMaps": []}}}
    payload = inject_jaas_config(document, JAAS)
    assert stream_ingestion(payload)["streamConfigMaps"] == [{SECRET: JAAS}]


def test_inject_does_not_mutate_input(realtime_config):
    before = copy.deepcopy(realtime_config)
    inject_jaas_config(realtime_config, JAAS)
    assert realtime_config == before


def test_redact_after_inject_restores_everything_else(realtime_config):
    realtime_config["tenants"] = {"broker": "DefaultTenant"}

    round_tripped = redact_secret(inject_jaas_config(realtime_config, JAAS))

    assert round_tripped == realtime_config
