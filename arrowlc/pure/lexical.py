"""Pure lambda calculus abstract syntax tree construction, binder identity resolution and normal-order reduction.

The `pure` directory contains the pure lambda calculus: no sessions, no error reporting, no command-line handling.

Formally, the arrow syntax can be defined as

```
<λ-term> ::= <name>                         ; "variable"
                                            ; - must be a single lowercase character
           | "(" <name> "->" <λ-term> ")"   ; "abstraction"
           | "(" <λ-term> <λ-term> ")"      ; "application"
                                            ; - exactly two terms: there is no implicit association
           | "(" <name> ":" <λ-term> ")"    ; "definition"
                                            ; - only valid as the outermost term of a program
```

Every term goes through three steps after parsing:
    1. Construction: LambdaTerm.generate_tree turns a generic parse tree (see pure/parse.py) into LambdaTerms
    2. Resolution: LambdaTerm.resolve gives every binder an unique integer identity, and every variable the identity
       of the binder it refers to. Free variables get identities of their own
    3. Reduction: NormalOrderReducer beta-reduces the term to its normal form

No alpha conversion is ever done. Variables are compared by binder identity instead of by name, and identities
never change after resolution, so substitution cannot capture a variable.
"""

from abc import abstractmethod, ABC
from itertools import count

from arrowlc.lang.error import ConstructionError, EvaluationError
from arrowlc.pure.parse import ARROW, COLON, Branch, Marker, Name


class LambdaTerm(ABC):
    """Represents a valid λ-term: variable, abstraction, application or definition. Also abstractly defines
    functionality that will allow a syntax tree to be built, resolved and reduced.
    """

    @staticmethod
    @abstractmethod
    def check_grammar(node, top_level):
        """This method should check node's top-level grammar and return whether or not it is valid. It should also
        raise a ConstructionError if node's top-level grammar is similar to the accepted grammar but invalid.
        top_level is whether or not node is the root of the program.
        """

    @classmethod
    @abstractmethod
    def from_node(cls, node):
        """Recursively builds a LambdaTerm from node. Assumes top-level grammar has been checked, but raises an error if
        second-level grammar is not valid.
        """

    @abstractmethod
    def define(self, ids):
        """Depth-first, pre-order assignment of binder identities. ids is an iterator of fresh identities."""

    @abstractmethod
    def define_body(self, name, binder_id):
        """Gives binder_id to every unresolved Variable called name, without entering binders that shadow name."""

    @abstractmethod
    def sub(self, binder_id, new_term, reducer):
        """Given a redex (λx.M) new_term where x has identity binder_id, this method returns M with every occurence of
        x replaced by its own copy of new_term. Mutates in place where possible.
        """

    @abstractmethod
    def clone(self, reducer):
        """Returns an independent copy of this term with the same identities. Every copied node counts towards the
        reducer's recursion limit.
        """

    @abstractmethod
    def reduce(self, reducer):
        """Performs one pass of normal-order reduction (at most one beta reduction) and returns the resulting term."""

    @abstractmethod
    def format(self, scope):
        """Returns surface syntax for this term. scope maps names to identities of the binders currently enclosing
        this term.
        """

    @classmethod
    def generate_tree(cls, node, top_level=True):
        """Converts node to the proper LambdaTerm type, raises ConstructionError if node is not a valid LambdaTerm."""
        for subclass in LambdaTerm.grammars():
            if subclass.check_grammar(node, top_level):
                return subclass.from_node(node)
        raise ConstructionError(f"'{node}' is not valid λ-term grammar", str(node))

    @staticmethod
    def grammars():
        """Concrete LambdaTerm subclasses, in definition order."""
        found = []
        pending = list(LambdaTerm.__subclasses__())
        while pending:
            subclass = pending.pop(0)
            if subclass.__subclasses__():
                pending = subclass.__subclasses__() + pending
            else:
                found.append(subclass)
        return found

    def resolve(self, ids=None):
        """In-place resolution of binder identities. A new counter starting at 0 is used if ids isn't given. Returns
        self for convenience.
        """
        self.define(count() if ids is None else ids)
        return self

    def __str__(self):
        return self.format({})


class Variable(LambdaTerm):
    """Variable in lambda calculus: a name referring to the binder with identity binder_id."""

    def __init__(self, name, binder_id=None):
        self.name = name
        self.binder_id = binder_id

    @staticmethod
    def check_grammar(node, top_level):
        return isinstance(node, Name)

    @classmethod
    def from_node(cls, node):
        return cls(node.char)

    def define(self, ids):
        if self.binder_id is None:
            self.binder_id = next(ids)  # free variable

    def define_body(self, name, binder_id):
        if self.binder_id is None and self.name == name:
            self.binder_id = binder_id

    def sub(self, binder_id, new_term, reducer):
        reducer.bump()
        if self.binder_id == binder_id:
            reducer.modified = True
            return new_term.clone(reducer)
        return self

    def clone(self, reducer):
        reducer.bump()
        return Variable(self.name, self.binder_id)

    def reduce(self, reducer):
        reducer.bump()
        return self

    def format(self, scope):
        if self.name in scope and scope[self.name] != self.binder_id:
            return f"{self.name}.{self.binder_id}"
        return self.name

    def __repr__(self):
        return f"Variable('{self.name}', {self.binder_id})"

    def __eq__(self, other):
        return isinstance(other, Variable) and (self.name, self.binder_id) == (other.name, other.binder_id)


class Binder(LambdaTerm):
    """Superclass for terms that introduce a name: abstractions and definitions."""
    SEPARATOR = None
    EXPECTED_BODY = None
    TOO_MANY_TERMS = None

    def __init__(self, name, body, binder_id=None):
        self.name = name
        self.body = body
        self.binder_id = binder_id

    @classmethod
    def matches(cls, node):
        """Whether or not node is a branch starting with a name and then this class's separator."""
        return isinstance(node, Branch) and len(node.nodes) >= 2 and isinstance(node.nodes[0], Name) \
            and node.nodes[1] is cls.SEPARATOR

    @classmethod
    def from_node(cls, node):
        name, __, body, *extra = node.nodes
        term = cls(name.char, LambdaTerm.generate_tree(body, top_level=False))
        if extra:
            raise ConstructionError(cls.TOO_MANY_TERMS, str(node))
        return term

    def define(self, ids):
        self.binder_id = next(ids)
        self.body.define_body(self.name, self.binder_id)
        self.body.define(ids)

    def define_body(self, name, binder_id):
        if self.name != name:
            self.body.define_body(name, binder_id)

    def sub(self, binder_id, new_term, reducer):
        reducer.bump()
        self.body = self.body.sub(binder_id, new_term, reducer)
        return self

    def clone(self, reducer):
        reducer.bump()
        return type(self)(self.name, self.body.clone(reducer), self.binder_id)

    def reduce(self, reducer):
        reducer.bump()
        self.body = self.body.reduce(reducer)
        return self

    def format(self, scope):
        if self.name in scope and self.binder_id is not None:
            return f"({self.name}.{self.binder_id} {self.SEPARATOR} {self.body.format(scope)})"

        outer = scope.get(self.name, self)
        scope[self.name] = self.binder_id
        result = f"({self.name} {self.SEPARATOR} {self.body.format(scope)})"

        if outer is self:
            del scope[self.name]
        else:
            scope[self.name] = outer
        return result

    def __repr__(self):
        return f"{type(self).__name__}('{self.name}', {self.body!r}, {self.binder_id})"

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return False
        return (self.name, self.binder_id, self.body) == (other.name, other.binder_id, other.body)


class Abstraction(Binder):
    """Abstraction: the basic datatype in lambda calculus."""
    SEPARATOR = ARROW
    EXPECTED_BODY = "Expected lambda body after arrow"
    TOO_MANY_TERMS = "Lambda body has too many terms"

    @staticmethod
    def check_grammar(node, top_level):
        if not Abstraction.matches(node):
            return False
        elif len(node.nodes) == 2:
            raise ConstructionError(Abstraction.EXPECTED_BODY, str(node))
        return True


class Application(LambdaTerm):
    """Application of a function to exactly one argument."""

    def __init__(self, func, arg):
        self.func = func
        self.arg = arg

    @staticmethod
    def check_grammar(node, top_level):
        """Applications are the catch-all grammar: any node that isn't a Variable, Abstraction or Definition is either
        an Application or a ConstructionError.
        """
        if isinstance(node, Marker):
            raise ConstructionError(Application.unexpected(node), str(node))
        elif not isinstance(node, Branch):
            return False
        elif not node.nodes:
            raise ConstructionError("Empty parentheses is invalid", str(node))

        first = node.nodes[0]
        if isinstance(first, Marker):
            raise ConstructionError(Application.unexpected(first), str(node))

        elif isinstance(first, Name):
            if len(node.nodes) == 1:
                raise ConstructionError("Expected more symbols after name", str(node))
            elif isinstance(node.nodes[1], Marker):
                return False  # abstraction or definition
            elif len(node.nodes) > 2:
                raise ConstructionError("Application has too many terms", str(node))

        return True

    @staticmethod
    def unexpected(marker):
        """Error message for marker appearing where a term is expected."""
        return "Unexpected arrow" if marker is ARROW else "Unexpected colon"

    @classmethod
    def from_node(cls, node):
        func = LambdaTerm.generate_tree(node.nodes[0], top_level=False)
        if len(node.nodes) < 2:
            raise ConstructionError("Expected application argument", str(node))

        arg = LambdaTerm.generate_tree(node.nodes[1], top_level=False)
        if len(node.nodes) > 2:
            raise ConstructionError("Application has too many terms", str(node))

        return cls(func, arg)

    def define(self, ids):
        self.func.define(ids)
        self.arg.define(ids)

    def define_body(self, name, binder_id):
        self.func.define_body(name, binder_id)
        self.arg.define_body(name, binder_id)

    def sub(self, binder_id, new_term, reducer):
        reducer.bump()
        self.func = self.func.sub(binder_id, new_term, reducer)
        self.arg = self.arg.sub(binder_id, new_term, reducer)
        return self

    def clone(self, reducer):
        reducer.bump()
        return Application(self.func.clone(reducer), self.arg.clone(reducer))

    def reduce(self, reducer):
        reducer.bump()

        if isinstance(self.func, Abstraction):  # self is the leftmost outermost redex
            result = self.func.body.sub(self.func.binder_id, self.arg, reducer)
            reducer.modified = True
            return result

        if isinstance(self.func, Application):
            self.func = self.func.reduce(reducer)
            if reducer.modified:
                return self

        if isinstance(self.arg, (Application, Abstraction)):
            self.arg = self.arg.reduce(reducer)
        return self

    def format(self, scope):
        return f"({self.func.format(scope)} {self.arg.format(scope)})"

    def __repr__(self):
        return f"Application({self.func!r}, {self.arg!r})"

    def __eq__(self, other):
        return isinstance(other, Application) and (self.func, self.arg) == (other.func, other.arg)


class Definition(Binder):
    """Named binding of a term. Definitions are only allowed as the outermost term of a program, and reduce to a
    definition of their reduced body.
    """
    SEPARATOR = COLON
    EXPECTED_BODY = "Expected term after colon"
    TOO_MANY_TERMS = "Definition has too many terms"

    @staticmethod
    def check_grammar(node, top_level):
        if not Definition.matches(node):
            return False
        elif len(node.nodes) == 2:
            raise ConstructionError(Definition.EXPECTED_BODY, str(node))
        elif not top_level:
            raise ConstructionError("Definition is only valid as the outermost term", str(node))
        return True


class NormalOrderReducer:
    """Implements normal-order beta reduction of a resolved syntax tree."""
    RECURSION_LIMIT = 1000

    def __init__(self, tree, recursion_limit=None, on_step=None):
        """tree must already be resolved. on_step is called with the whole tree after every beta reduction."""
        self.tree = tree
        self.recursion_limit = recursion_limit if recursion_limit is not None else NormalOrderReducer.RECURSION_LIMIT
        self.on_step = on_step

        self.recursion = 0      # shared by every reduce/sub/clone call of this reducer
        self.modified = False   # whether or not the current pass changed self.tree

    def bump(self):
        """Counts one recursive call. Raises EvaluationError once the recursion limit is hit."""
        self.recursion += 1
        if self.recursion >= self.recursion_limit:
            raise EvaluationError("Hit recursion limit", diagnosis=False)

    def step(self):
        """Runs a single reduction pass over self.tree. Returns whether or not a beta reduction happened."""
        self.modified = False
        self.tree = self.tree.reduce(self)
        return self.modified

    def beta_reduce(self):
        """In-place normal-order beta reduction of self.tree. Returns the normal form, which might not be the original
        root object (the root itself can be a redex).
        """
        while self.step():
            if self.on_step is not None:
                self.on_step(self.tree)

        return self.tree

    def __repr__(self):
        return f"NormalOrderReducer({self.tree!r})"

    def __str__(self):
        return str(self.tree)


def evaluate(term, recursion_limit=None, on_step=None):
    """Reduces resolved term to beta normal form and returns the result. term must not be used after this call."""
    return NormalOrderReducer(term, recursion_limit, on_step).beta_reduce()
