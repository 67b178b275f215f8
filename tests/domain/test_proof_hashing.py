import hashlib

from ragbits_exchange.domain.services.proof_hashing import answer_hash


def test_hash_is_sha256_over_compact_json_in_fixed_key_order():
    payload = '{"answer":"42","chunkIds":[3,1],"timestamp":1700000000000,"model":"fallback"}'
    expected = "0x" + hashlib.sha256(payload.encode("utf-8")).hexdigest()
    assert answer_hash("42", [3, 1], "fallback", 1700000000000) == expected


def test_non_ascii_answers_are_hashed_as_utf8():
    payload = '{"answer":"Grüße","chunkIds":[],"timestamp":1,"model":"m"}'
    expected = "0x" + hashlib.sha256(payload.encode("utf-8")).hexdigest()
    assert answer_hash("Grüße", [], "m", 1) == expected


def test_every_input_changes_the_hash():
    base = answer_hash("a", [0, 1], "m", 1)
    assert answer_hash("b", [0, 1], "m", 1) != base
    assert answer_hash("a", [1, 0], "m", 1) != base
    assert answer_hash("a", [0, 1], "n", 1) != base
    assert answer_hash("a", [0, 1], "m", 2) != base
    assert answer_hash("a", (0, 1), "m", 1) == base
