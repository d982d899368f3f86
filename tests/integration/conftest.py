"""Integration test fixtures: real adapters and parsers, mocked HTTP."""

from __future__ import annotations

import httpx
import pytest
import respx

from bbm_indonesia.providers.bp import BP_URL
from bbm_indonesia.providers.pertamina import PERTAMINA_URL
from bbm_indonesia.providers.shell import SHELL_URL

PERTAMINA_PAGE = """
<table>
  <tr><th>Provinsi</th><th>Pertalite</th><th>Pertamax</th></tr>
  <tr><td>Prov. DKI Jakarta</td><td>Rp 10.000</td><td>Rp 12.950</td></tr>
  <tr><td>Prov. Jawa Barat</td><td>Rp 10.000</td><td>Rp 12.950</td></tr>
  <tr><td>Prov. Kep. Riau</td><td>Rp 10.000</td><td>Rp 13.250</td></tr>
  <tr><td>Prov. Riau</td><td>Rp 10.000</td><td>Rp 13.250</td></tr>
  <tr><td>Prov. D.I. Yogyakarta</td><td>Rp 10.000</td><td>Rp 12.950</td></tr>
</table>
"""

SHELL_PAGE = """
<table>
  <tr><td>Jenis BBM</td><td>Lokasi</td><td>Harga per Liter</td></tr>
  <tr><td>Shell Super</td><td>Jakarta, Banten, Jawa Barat</td><td>Rp12,700</td></tr>
  <tr><td>Shell Super</td><td>Sumut</td><td>Rp13,050</td></tr>
</table>
"""


@pytest.fixture
def mocked_sites():
    """Serve fixture pages for Pertamina and Shell; BP is down."""
    with respx.mock(assert_all_called=False) as router:
        router.get(PERTAMINA_URL).mock(return_value=httpx.Response(200, text=PERTAMINA_PAGE))
        router.get(SHELL_URL).mock(return_value=httpx.Response(200, text=SHELL_PAGE))
        router.get(BP_URL).mock(return_value=httpx.Response(503))
        yield router
