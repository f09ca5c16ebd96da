"""Import classes used to maintain and query the state of planning problems."""

from .knowledge_service import ActionDetails as ActionDetails
from .knowledge_service import KnowledgeService as KnowledgeService
from .knowledge_service import PredicateDetails as PredicateDetails
from .outcome import Outcome as Outcome
from .problem import Instance as Instance
from .problem import ProblemKnowledgeBase as ProblemKnowledgeBase
