"""Line oriented text calculator: variables, forward references, numerals in bases 2..16."""

from .MathEngine import Evaluator, Environment, Outcome, Resolved, Pending, Fatal
from .error import MathError, UnresolvedBlock
