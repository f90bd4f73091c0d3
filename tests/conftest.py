import pytest

from h2j import H2JConfig, ResourceManager
from h2j.profiles import Profile

SAMPLE_SEGMENTS = [
    "MSH|^~\\&|LAB^2.16.840.1.114222^ISO|SPRINGFIELD LAB^12D4567890^CLIA"
    "|PHINCDS^2.16.840.1.114222.4.3.2.10^ISO|PHIN^2.16.840.1.114222^ISO|20240102120000||ORU^R01^ORU_R01"
    "|MSG00001|P|2.5.1|||NE|NE|USA||||PHLabReport-NoAck^PHIN^2.16.840.1.113883.9.11^ISO"
    "~ELR_Receiver^PHIN^2.16.840.1.113883.9.12^ISO",
    "SFT|Orion Health^L^^^^CLIA&2.16.840.1.113883.19.4.6&ISO^XX^^^123544|2.5|Rhapsody|6.1||20240101",
    "PID|1||A123^^^STATE&2.16.840.1.114222&ISO^MR~B456^^^HOSP&1.2.3&ISO^PI||DOE^JOHN^Q||19800101|M"
    "||2106-3^White^CDCREC|123 MAIN ST^^SPRINGFIELD^IL^62701^USA",
    "NK1|1|DOE^JANE|MTH^Mother^HL70063",
    "ORC|RE||FILL123^LAB^2.16.840.1.114222^ISO",
    "OBR|1||FILL123^LAB^2.16.840.1.114222^ISO|625-4^Bacteria identified^LN|||20240101080000"
    "|||||||||||||||20240102110000|||F",
    "OBX|1|CWE|625-4^Bacteria identified^LN||3092008^Staphylococcus aureus^SCT||||||F",
    "OBX|2|NM|2345-7^Glucose^LN||1~2~3|mg/dL^milligram per deciliter^UCUM|||||F",
    "OBX|3|ST|8251-1^Service comment^LN||Final report||||||F",
    "SPM|1|SP123&LAB&2.16.840.1.114222&ISO^FILL123&LAB&2.16.840.1.114222&ISO||119297000^Blood^SCT",
]

SAMPLE_MESSAGE = "\r".join(SAMPLE_SEGMENTS)


@pytest.fixture
def sample_message():
    return SAMPLE_MESSAGE


@pytest.fixture
def config():
    return H2JConfig()


@pytest.fixture
def resource_manager():
    return ResourceManager()


@pytest.fixture
def phin_profile(resource_manager):
    return resource_manager.load_profile("PhinGuideProfile.json")


@pytest.fixture
def fields_profile(resource_manager):
    return resource_manager.load_profile("DefaultFieldsProfile.json")


@pytest.fixture
def flat_profile(phin_profile):
    """The PHIN segment fields without grouping rules: every segment is top level."""
    return Profile(segment_fields=phin_profile.segment_fields)
