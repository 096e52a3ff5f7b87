"""
Types here are instantiated as subclasses of pydantic's `BaseModel`.
This means we get runtime deserialization and validation for free just by using type declarations
and a couple of pydantic helpers.

Use these in your code as python objects, then serialize to json by converting to a dict with `.dict()`
"""

from waterdrop.models.Config import *
from waterdrop.models.Event import *
from waterdrop.models.Ledger import *
from waterdrop.models.Token import *
from waterdrop.models.types import *
from waterdrop.models.Writer import *
