from waterdrop.queries.common import *
from waterdrop.queries.indexer import *
from waterdrop.queries.proxy import *
