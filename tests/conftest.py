"""Shared fixtures for dbc_codec tests."""

from pathlib import Path

import pytest

SAMPLE_DBC = '''VERSION ""

NS_ :
    NS_DESC_
    CM_

BS_:

BU_: BMS VCU DASH ECU

BO_ 2550589684 BMS_SOC_INFO: 8 BMS
 SG_ SOC : 0|8@1+ (1,0) [0|100] "%" VCU
 SG_ SOH : 8|8@1+ (1,0) [0|255] "%" VCU,DASH
 SG_ PackCurrent : 16|16@1- (0.1,0) [-3276.8|3276.7] "A" VCU

BO_ 256 EngineStatus: 8 ECU
 SG_ RPM : 0|16@1+ (0.25,0) [0|16383.75] "rpm" DASH
 SG_ Temp : 16|8@1+ (1,-40) [-40|215] "degC" DASH
 SG_ Running : 24@1+ (1,0) [0|1] "" DASH
 SG_ Gear : 25-28@1+ (1,0) [0,15] "" DASH

BO_ 1024 Diagnostics: 64 VCU
 SG_ Counter : 0|8@1+ (1,0) [0|255] "" ECU
 SG_ Checksum : 504|8@1+ (1,0) [0|255] "" ECU

CM_ BO_ 256 "Engine state broadcast";
CM_ SG_ 256 RPM "Crankshaft speed";
BA_DEF_ BO_ "GenMsgCycleTime" INT 0 65535;
BA_ "GenMsgCycleTime" BO_ 256 100;
VAL_ 256 Gear 0 "N" 1 "D" ;
'''


@pytest.fixture
def sample_dbc_text() -> str:
    """DBC text with a BMS message, an engine message and a CAN-FD message."""
    return SAMPLE_DBC


@pytest.fixture
def sample_dbc_file(tmp_path: Path) -> Path:
    """SAMPLE_DBC written to a temporary file."""
    path = tmp_path / "sample.dbc"
    path.write_text(SAMPLE_DBC, encoding="utf-8")
    return path
