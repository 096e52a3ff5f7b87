from waterdrop.rewards.classifier import *
from waterdrop.rewards.aggregator import *
from waterdrop.rewards.allocator import *
