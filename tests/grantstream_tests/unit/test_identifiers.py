from grantstream.core.constants import STREAM_SEED, VESTING_SEED
from grantstream.core.identifiers import custody_account, derive_id, derive_treasury_id


def test_derivation_is_deterministic():
    treasury_id = derive_treasury_id("0xAuthority")
    assert treasury_id == derive_treasury_id("0xAuthority")
    assert len(treasury_id) == 64
    assert derive_id(STREAM_SEED, treasury_id, "0xUser") == derive_id(STREAM_SEED, treasury_id, "0xUser")


def test_seed_and_inputs_separate_identifiers():
    treasury_id = derive_treasury_id("0xAuthority")
    stream_id = derive_id(STREAM_SEED, treasury_id, "0xUser")
    vesting_id = derive_id(VESTING_SEED, treasury_id, "0xUser")
    assert stream_id != vesting_id
    assert derive_id(STREAM_SEED, treasury_id, "0xOther") != stream_id
    assert derive_treasury_id("0xOtherAuthority") != treasury_id


def test_part_boundaries_are_not_ambiguous():
    assert derive_id(STREAM_SEED, "ab", "c") != derive_id(STREAM_SEED, "a", "bc")


def test_custody_account_is_bound_to_grant():
    assert custody_account("abc") == "custody:abc"
