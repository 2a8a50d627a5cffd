"""
Known skill vocabularies and alias normalization shared by the parsers.
"""
import re
from typing import Dict, List

TECHNICAL_SKILLS = [
    "JavaScript", "TypeScript", "Python", "Java", "C++", "C#", "Ruby", "PHP", "Golang",
    "Rust", "Swift", "Kotlin", "Scala", "Dart", "HTML", "CSS", "SQL", "NoSQL", "GraphQL",
    "REST", "React", "React Native", "Redux", "Angular", "Vue.js", "Next.js", "Node.js",
    "Express", "Django", "Flask", "FastAPI", "Spring Boot", "Laravel", "Ruby on Rails",
    "MongoDB", "PostgreSQL", "MySQL", "SQLite", "Redis", "Firebase", "Flutter",
    "Bootstrap", "Tailwind CSS", "Sass", "jQuery", "TensorFlow", "PyTorch", "Pandas",
    "NumPy", "scikit-learn", "Machine Learning", "Deep Learning", "Data Analysis",
]

TOOLS = [
    "Git", "GitHub", "GitLab", "Bitbucket", "Docker", "Kubernetes", "AWS", "Azure", "GCP",
    "Jenkins", "Terraform", "Ansible", "Jira", "Confluence", "Figma", "Postman", "VS Code",
    "Linux", "Webpack", "Vite", "Heroku", "Vercel", "Netlify", "Tableau", "Power BI",
]

SOFT_SKILLS = [
    "Communication", "Leadership", "Teamwork", "Team Collaboration", "Problem Solving",
    "Time Management", "Critical Thinking", "Adaptability", "Project Management",
    "Mentoring", "Public Speaking", "Collaboration", "Attention to Detail",
]

SPOKEN_LANGUAGES = [
    "English", "Spanish", "French", "German", "Hindi", "Mandarin", "Chinese", "Japanese",
    "Korean", "Portuguese", "Arabic", "Italian", "Russian", "Bengali", "Tamil", "Telugu",
    "Marathi", "Urdu", "Dutch", "Turkish",
]

VOCABULARIES: Dict[str, List[str]] = {
    "technical": TECHNICAL_SKILLS,
    "tools": TOOLS,
    "soft": SOFT_SKILLS,
    "languages": SPOKEN_LANGUAGES,
}

SKILL_ALIASES = {
    "js": "JavaScript",
    "ts": "TypeScript",
    "py": "Python",
    "cpp": "C++",
    "golang": "Golang",
    "go": "Golang",
    "node": "Node.js",
    "nodejs": "Node.js",
    "node js": "Node.js",
    "react.js": "React",
    "reactjs": "React",
    "vue": "Vue.js",
    "vuejs": "Vue.js",
    "nextjs": "Next.js",
    "angular.js": "Angular",
    "angularjs": "Angular",
    "mongo": "MongoDB",
    "postgres": "PostgreSQL",
    "k8s": "Kubernetes",
    "tf": "Terraform",
    "gcp": "GCP",
    "google cloud": "GCP",
    "ml": "Machine Learning",
    "dl": "Deep Learning",
    "vscode": "VS Code",
    "sklearn": "scikit-learn",
}

_CANONICAL = {
    name.lower(): name
    for vocabulary in VOCABULARIES.values()
    for name in vocabulary
}


def normalize_skill_name(skill_name: str) -> str:
    """Canonical display spelling for a known skill; unknown skills are only trimmed."""
    cleaned = " ".join(skill_name.split())
    key = cleaned.lower()
    if key in SKILL_ALIASES:
        return SKILL_ALIASES[key]
    return _CANONICAL.get(key, cleaned)


def _skill_pattern(name: str) -> re.Pattern:
    # Canonical spelling only; lowercase "swift" or "rest" in prose is not a skill
    return re.compile(rf"(?<![A-Za-z0-9]){re.escape(name)}(?![A-Za-z0-9+#])")


_PATTERNS: Dict[str, List[tuple]] = {
    category: [(name, _skill_pattern(name)) for name in vocabulary]
    for category, vocabulary in VOCABULARIES.items()
}


def find_known_skills(text: str) -> Dict[str, List[str]]:
    """Every vocabulary skill mentioned in its canonical spelling, grouped by category, in vocabulary order."""
    found = {}
    for category, patterns in _PATTERNS.items():
        found[category] = [name for name, pattern in patterns if pattern.search(text)]
    return found
