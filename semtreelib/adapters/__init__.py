"""Format adapters for SemTreeLib.

Importing this package registers each adapter's default settings as an
extension section of the global configuration defaults.
"""

from .base import Adapter, AdapterExecutor
from .json import (
    JsonConfig,
    JsonToXNodeAdapter,
    XNodeToJsonAdapter,
    from_json_string,
    to_json_string,
)
from .xml import (
    XmlConfig,
    XmlToXNodeAdapter,
    XNodeToXmlAdapter,
    from_xml_string,
    to_xml_string,
)
from .xnode import (
    SerializedToXNodeAdapter,
    XNodeConfig,
    XNodeToSerializedAdapter,
)

__all__ = [
    'Adapter',
    'AdapterExecutor',
    'JsonConfig',
    'JsonToXNodeAdapter',
    'XNodeToJsonAdapter',
    'from_json_string',
    'to_json_string',
    'XmlConfig',
    'XmlToXNodeAdapter',
    'XNodeToXmlAdapter',
    'from_xml_string',
    'to_xml_string',
    'SerializedToXNodeAdapter',
    'XNodeConfig',
    'XNodeToSerializedAdapter',
]
