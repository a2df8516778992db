"""Protocol schema extraction from the client bytecode."""

from .builder import ProtocolBuilder as ProtocolBuilder
from .builder import build as build
from .builder import load_program as load_program
from .classes import extract_class as extract_class
from .classes import extract_enum as extract_enum
from .config import Settings as Settings
from .errors import *
from .types import *
from .verify import ValidationError as ValidationError
from .verify import verify as verify
from .version import extract_version as extract_version
