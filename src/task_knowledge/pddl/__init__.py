"""Import PDDL-related classes and definitions."""

from .domain import ActionSignature as ActionSignature
from .domain import DomainModel as DomainModel
from .domain import DurativeActionSignature as DurativeActionSignature
from .domain_parser import DomainParser as DomainParser
from .domain_parser import extend_domain as extend_domain
from .domain_parser import load_domain_files as load_domain_files
from .domain_parser import parse_domain as parse_domain
from .errors import DomainParseError as DomainParseError
from .errors import MalformedExpression as MalformedExpression
from .errors import PDDLError as PDDLError
from .expressions import And as And
from .expressions import Conjunction as Conjunction
from .expressions import Disjunction as Disjunction
from .expressions import ExpressionNode as ExpressionNode
from .expressions import ExpressionTree as ExpressionTree
from .expressions import Negation as Negation
from .expressions import Not as Not
from .expressions import Or as Or
from .expressions import Param as Param
from .expressions import Predicate as Predicate
from .expressions import PredicateLeaf as PredicateLeaf
from .expressions import is_empty as is_empty
from .expressions import matches as matches
from .expressions import parse_expression as parse_expression
from .expressions import serialize as serialize
from .expressions import substitute as substitute
from .pddl_scanner import PDDLScanner as PDDLScanner
from .pddl_scanner import PDDLToken as PDDLToken
from .pddl_scanner import PDDLTokenType as PDDLTokenType
from .text_codec import normalize as normalize
from .text_codec import split_top_level as split_top_level
from .type_hierarchy import TypeHierarchy as TypeHierarchy
