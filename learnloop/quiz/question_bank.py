"""
Static Question Bank.

Read-only table of hand-written questions keyed by (topic, level), plus a
general pool (topic ``general``, level ``mixed``). Used when AI generation
is off and as the last-resort fallback when it fails.
"""

from __future__ import annotations

import random

from learnloop.core.question import Question

LEVELS: tuple[str, ...] = ("beginner", "intermediate", "advanced")
GENERAL_TOPIC = "general"
GENERAL_LEVEL = "mixed"
BANK_SOURCE = "static"


def _q(
    qid: int,
    topic: str,
    level: str,
    question: str,
    options: list[str],
    correct: int,
    explanation: str,
) -> Question:
    return Question(
        id=str(qid),
        question=question,
        options=options,
        correct=correct,
        explanation=explanation,
        topic=topic,
        level=level,
        source=BANK_SOURCE,
    )


def _general(qid: int, question: str, options: list[str], correct: int, explanation: str) -> Question:
    return _q(qid, GENERAL_TOPIC, GENERAL_LEVEL, question, options, correct, explanation)


GENERAL_QUESTIONS: tuple[Question, ...] = (
    _general(
        1, "What does HTML stand for?",
        ["Hyper Text Markup Language", "High Tech Modern Language", "Home Tool Markup Language",
         "Hyperlink and Text Markup Language"],
        0,
        "HTML stands for Hyper Text Markup Language. It's the standard markup language used to "
        "create web pages and web applications.",
    ),
    _general(
        2, "Which of the following is NOT a JavaScript data type?",
        ["String", "Boolean", "Float", "Undefined"],
        2,
        "JavaScript doesn't have a 'Float' data type. It uses 'Number' for both integers and "
        "floating-point numbers.",
    ),
    _general(
        3, "What is the time complexity of binary search?",
        ["O(n)", "O(log n)", "O(n²)", "O(1)"],
        1,
        "Binary search has O(log n) time complexity because it eliminates half of the remaining "
        "elements in each step.",
    ),
    _general(
        4, "Which CSS property is used to change the text color?",
        ["text-color", "font-color", "color", "text-style"],
        2,
        "The 'color' property in CSS sets the color of text, for example color: red;",
    ),
    _general(
        5, "What does API stand for?",
        ["Application Programming Interface", "Automated Programming Interface",
         "Advanced Programming Interface", "Application Process Interface"],
        0,
        "API stands for Application Programming Interface: a set of protocols and tools that lets "
        "software applications communicate with each other.",
    ),
    _general(
        6, "Which of these is a NoSQL database?",
        ["MySQL", "PostgreSQL", "MongoDB", "SQLite"],
        2,
        "MongoDB is a document-oriented NoSQL database. MySQL, PostgreSQL and SQLite are "
        "relational databases.",
    ),
    _general(
        7, "What is the main purpose of Git?",
        ["Web development", "Version control", "Database management", "Code compilation"],
        1,
        "Git is a distributed version control system used to track changes in source code.",
    ),
    _general(
        8, "Which HTTP status code indicates 'Not Found'?",
        ["200", "301", "404", "500"],
        2,
        "HTTP 404 means the server cannot find the requested resource. 200 is OK, 301 Moved "
        "Permanently, 500 Internal Server Error.",
    ),
    _general(
        9, "What does CPU stand for?",
        ["Central Processing Unit", "Computer Processing Unit", "Central Program Unit",
         "Computer Program Unit"],
        0,
        "CPU stands for Central Processing Unit, the part of the computer that executes "
        "instructions.",
    ),
    _general(
        10, "Which programming paradigm does JavaScript primarily support?",
        ["Only Object-Oriented", "Only Functional", "Multi-paradigm", "Only Procedural"],
        2,
        "JavaScript is multi-paradigm: it supports object-oriented, functional and procedural "
        "styles.",
    ),
    _general(
        11, "What is the purpose of the 'alt' attribute in HTML img tags?",
        ["To resize the image", "To provide alternative text", "To set image alignment",
         "To add image borders"],
        1,
        "The 'alt' attribute provides alternative text shown when the image cannot load and read "
        "by screen readers.",
    ),
    _general(
        12, "Which of these is NOT a valid CSS selector?",
        [".class", "#id", "element", "@media"],
        3,
        "@media is an at-rule used for media queries, not a selector.",
    ),
)


LEVEL_QUESTIONS: tuple[Question, ...] = (
    # OOP
    _q(201, "oops", "beginner", "What does OOP stand for?",
       ["Object-Oriented Programming", "Only One Program", "Organized Object Process",
        "Optimal Operation Procedure"], 0,
       "OOP stands for Object-Oriented Programming, a paradigm based on objects that bundle data "
       "and code."),
    _q(202, "oops", "beginner", "Which of the following is NOT a pillar of OOP?",
       ["Encapsulation", "Inheritance", "Polymorphism", "Compilation"], 3,
       "The four pillars of OOP are Encapsulation, Inheritance, Polymorphism and Abstraction."),
    _q(203, "oops", "intermediate", "What is method overloading?",
       ["Having multiple methods with same name but different parameters",
        "Overriding a parent class method", "Using too many methods", "Loading methods dynamically"], 0,
       "Method overloading allows several methods with the same name but different parameter "
       "lists."),
    _q(204, "oops", "intermediate", "Which relationship is represented by 'IS-A'?",
       ["Composition", "Aggregation", "Inheritance", "Association"], 2,
       "'IS-A' is inheritance: a subclass is a type of its superclass (Car IS-A Vehicle)."),
    _q(205, "oops", "advanced", "What is the difference between composition and inheritance?",
       ["No difference", "Composition is 'HAS-A', Inheritance is 'IS-A'", "Composition is faster",
        "Inheritance is newer"], 1,
       "Composition models 'HAS-A' (an object contains others) while inheritance models 'IS-A'. "
       "Composition gives looser coupling."),
    # Java
    _q(301, "java", "beginner", "Who developed Java?",
       ["Microsoft", "Sun Microsystems", "Oracle", "Google"], 1,
       "Java was developed at Sun Microsystems in 1995 by James Gosling's team. Oracle acquired "
       "Sun in 2010."),
    _q(302, "java", "beginner", "What is JVM?",
       ["Java Virtual Machine", "Java Variable Method", "Java Version Manager", "Java Vendor Module"], 0,
       "The Java Virtual Machine executes Java bytecode and provides platform independence."),
    _q(303, "java", "intermediate", "What is the difference between '==' and '.equals()' in Java?",
       ["No difference", "'==' compares references, '.equals()' compares values",
        "'.equals()' is faster", "'==' is deprecated"], 1,
       "'==' compares object references while '.equals()' compares content."),
    _q(304, "java", "intermediate", "What is a checked exception in Java?",
       ["Exception checked at runtime", "Exception that must be caught or declared",
        "Exception in check() method", "Boolean exception"], 1,
       "Checked exceptions must be caught with try-catch or declared with 'throws', e.g. "
       "IOException."),
    _q(305, "java", "advanced", "What is the purpose of the 'volatile' keyword in Java?",
       ["Makes variables temporary", "Ensures thread-safe access to variables",
        "Speeds up variable access", "Makes variables constant"], 1,
       "'volatile' makes writes to a variable immediately visible to all threads."),
    # Python
    _q(401, "python", "beginner", "What is the correct way to create a list in Python?",
       ["list = {1, 2, 3}", "list = [1, 2, 3]", "list = (1, 2, 3)", "list = <1, 2, 3>"], 1,
       "Lists use square brackets. Curly braces create sets and parentheses create tuples."),
    _q(402, "python", "beginner", "Which of these is NOT a Python data type?",
       ["int", "float", "string", "char"], 3,
       "Python has no separate 'char' type; single characters are strings of length 1."),
    _q(403, "python", "intermediate", "What is a list comprehension in Python?",
       ["A way to compress lists", "A concise way to create lists", "A list documentation",
        "A list comparison method"], 1,
       "A list comprehension builds a list concisely, e.g. [x*2 for x in range(5)]."),
    _q(404, "python", "intermediate", "What does the '*args' parameter do in Python functions?",
       ["Multiplies arguments", "Accepts variable number of arguments", "Creates argument arrays",
        "Passes arguments by reference"], 1,
       "*args collects any number of positional arguments into a tuple."),
    _q(405, "python", "advanced", "What is the Global Interpreter Lock (GIL) in Python?",
       ["A security feature",
        "A mechanism that prevents multiple threads from executing Python code simultaneously",
        "A global variable lock", "A file locking system"], 1,
       "The GIL is a mutex that lets only one native thread execute Python bytecode at a time."),
    # AI
    _q(501, "ai", "beginner", "What does AI stand for?",
       ["Automated Intelligence", "Artificial Intelligence", "Advanced Intelligence",
        "Augmented Intelligence"], 1,
       "AI stands for Artificial Intelligence, the simulation of human intelligence in machines."),
    _q(502, "ai", "beginner", "Which of these is an example of supervised learning?",
       ["Clustering", "Email spam detection", "Anomaly detection", "Dimensionality reduction"], 1,
       "Spam detection trains on labeled examples, which makes it supervised learning."),
    _q(503, "ai", "intermediate", "What is overfitting in machine learning?",
       ["Model performs well on training data but poorly on new data", "Model is too simple",
        "Model trains too fast", "Model uses too much memory"], 0,
       "An overfit model learns noise in the training data and generalizes poorly."),
    _q(504, "ai", "intermediate", "What is the purpose of a validation set?",
       ["To train the model", "To test final performance",
        "To tune hyperparameters and prevent overfitting", "To store backup data"], 2,
       "The validation set is used to tune hyperparameters and watch for overfitting."),
    _q(505, "ai", "advanced", "What is the vanishing gradient problem in deep neural networks?",
       ["Gradients become too large",
        "Gradients become very small in early layers during backpropagation",
        "Gradients disappear from memory", "Gradients change randomly"], 1,
       "Gradients shrink exponentially through many layers, so early layers barely learn. "
       "Residual connections and better activations help."),
    # Databases
    _q(601, "databases", "beginner", "What does SQL stand for?",
       ["Structured Query Language", "Simple Query Language", "Standard Query Language",
        "Sequential Query Language"], 0,
       "SQL stands for Structured Query Language, used to manage relational databases."),
    _q(602, "databases", "beginner", "What is a primary key?",
       ["The first key in a table", "A unique identifier for each record", "The most important column",
        "A password for the database"], 1,
       "A primary key uniquely identifies each record and cannot be NULL."),
    _q(603, "databases", "intermediate", "What is database normalization?",
       ["Making databases normal", "Organizing data to reduce redundancy", "Backing up databases",
        "Encrypting database data"], 1,
       "Normalization organizes tables to reduce redundancy and improve integrity."),
    _q(604, "databases", "intermediate", "What is the difference between INNER JOIN and LEFT JOIN?",
       ["No difference",
        "INNER JOIN returns matching records, LEFT JOIN returns all left table records",
        "LEFT JOIN is faster", "INNER JOIN is deprecated"], 1,
       "INNER JOIN keeps only matching rows; LEFT JOIN keeps every left row and fills NULLs."),
    _q(605, "databases", "advanced", "What is ACID in database transactions?",
       ["A database acid test", "Atomicity, Consistency, Isolation, Durability", "A type of database",
        "A query optimization technique"], 1,
       "ACID: Atomicity, Consistency, Isolation and Durability of transactions."),
)


class QuestionBank:
    """In-memory lookup over the static questions."""

    def __init__(
        self,
        level_questions: tuple[Question, ...] | list[Question] = LEVEL_QUESTIONS,
        general_questions: tuple[Question, ...] | list[Question] = GENERAL_QUESTIONS,
        rng: random.Random | None = None,
    ):
        self.rng = rng or random.Random()
        self._general = list(general_questions)
        self._table: dict[tuple[str, str], list[Question]] = {}
        for q in level_questions:
            self._table.setdefault((q.topic, q.level), []).append(q)
        self._by_id = {q.id: q for q in [*self._general, *level_questions]}

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, question_id: str) -> Question | None:
        return self._by_id.get(str(question_id))

    def topics(self) -> list[str]:
        seen: dict[str, None] = {}
        for topic, _ in self._table:
            seen.setdefault(topic, None)
        return list(seen)

    def levels(self) -> list[str]:
        return list(LEVELS)

    def questions_for(self, topic: str, level: str | None = None) -> list[Question]:
        """Questions for a topic, optionally narrowed to one level."""
        if level:
            return list(self._table.get((topic, level), []))
        return [q for (t, _), pool in self._table.items() if t == topic for q in pool]

    def all(self) -> list[Question]:
        return list(self._by_id.values())

    def random_question(self, topic: str | None = None, level: str | None = None) -> Question | None:
        """
        Random question for (topic, level).

        Falls back to every question of the topic, then to every question
        of the level, then to the whole bank, when the narrower pool is
        empty. Without a topic the level still narrows the pool.
        """
        pool: list[Question] = []
        if topic:
            pool = self.questions_for(topic, level)
            if not pool:
                pool = self.questions_for(topic)
        if not pool and level:
            pool = [q for q in self.all() if q.level == level]
        if not pool:
            pool = self.all()
        return self.rng.choice(pool) if pool else None
