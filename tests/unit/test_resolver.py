import pytest

from kodepos.common.errors import ResolutionFault
from kodepos.common.models import RegencyKey, RegencyRow
from kodepos.pipeline.resolver import RegencyResolver


def test_resolver_maps_composite_regency_key_to_province():
    resolver = RegencyResolver.from_records(
        [
            RegencyRow(province_name="Jawa Barat", regency=RegencyKey("Kota", "Bandung")),
            RegencyRow(province_name="Jawa Barat", regency=RegencyKey("Kabupaten", "Bandung")),
            RegencyRow(province_name="DKI Jakarta", regency=RegencyKey("Kota", "Jakarta Pusat")),
        ]
    )

    assert len(resolver) == 3
    ref = resolver.resolve(RegencyKey("Kabupaten", "Bandung"))
    assert ref.name == "Jawa Barat"
    assert ref.provisional_id == 0
    assert RegencyKey("Kota", "Jakarta Pusat") in resolver


def test_resolver_unknown_key_is_a_resolution_fault():
    resolver = RegencyResolver.from_records([])
    with pytest.raises(ResolutionFault) as excinfo:
        resolver.resolve(RegencyKey("Kota", "Atlantis"), source_ref="raw/pages/village/page_9.txt#3")
    assert excinfo.value.key == "raw/pages/village/page_9.txt#3"


def test_resolver_tolerates_repeated_regency_rows():
    bandung = RegencyKey("Kota", "Bandung")
    resolver = RegencyResolver.from_records(
        [RegencyRow("Jawa Barat", bandung), RegencyRow("Jawa Barat", bandung)]
    )
    assert len(resolver) == 1
    assert resolver.resolve(bandung).name == "Jawa Barat"


def test_resolver_rejects_regency_claimed_by_two_provinces():
    bandung = RegencyKey("Kota", "Bandung")
    with pytest.raises(ResolutionFault) as excinfo:
        RegencyResolver.from_records([RegencyRow("Jawa Barat", bandung), RegencyRow("Banten", bandung)])
    assert excinfo.value.key == "Kota Bandung"
