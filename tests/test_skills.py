from nlp import skills


def test_primary_and_secondary_vocabularies_are_separate():
    text = "Skills: Python, Django, PostgreSQL, AWS\nTools: Docker, Git, JIRA"
    primary = skills.extract_primary_skills(text)
    secondary = skills.extract_secondary_skills(text)

    assert {"Python", "Django", "PostgreSQL", "AWS"} <= set(primary)
    assert {"Docker", "Git", "JIRA"} <= set(secondary)
    assert "Docker" not in primary
    assert "Python" not in secondary


def test_word_boundaries_handle_symbols_and_substrings():
    text = "Languages: C++, C#, JavaScript"
    primary = skills.extract_primary_skills(text)
    assert "C++" in primary
    assert "C#" in primary
    assert "JavaScript" in primary
    # "Java" only appears inside "JavaScript"
    assert "Java" not in primary


def test_skill_inside_email_is_ignored():
    text = "Contact: rust@example.com\nSkills: Python"
    assert "Rust" not in skills.extract_primary_skills(text)

    text_with_mention = "Contact: rust@example.com\nSkills: Rust, Python"
    assert "Rust" in skills.extract_primary_skills(text_with_mention)


def test_mention_whose_window_reaches_an_email_is_ignored():
    assert skills.find_skill_contexts("Python | jane@example.com", "Python") == []
    assert skills.extract_secondary_skills("GitHub | linkedin | dev@example.com") == []
    # the window stops at the line break
    assert len(skills.find_skill_contexts("jane@example.com\nSkills: Python", "Python")) == 1


def test_skill_inside_bare_url_is_ignored():
    text = "JANE DOE\nlinkedin.com/in/rust-dev | github.com/jane/go-kit\nSkills: Python"
    assert skills.extract_primary_skills(text) == ["Python"]
    assert "GitHub" not in skills.extract_secondary_skills(text)


def test_longer_vocabulary_term_is_credited_alone():
    primary = skills.extract_primary_skills("Skills: Vue.js, React Native")
    assert "Vue.js" in primary
    assert "React Native" in primary
    assert "Vue" not in primary
    assert "React" not in primary

    both = skills.extract_primary_skills("Skills: React Native, React")
    assert "React" in both


def test_dotted_skill_names_are_not_urls():
    primary = skills.extract_primary_skills("Skills: ASP.NET, C#, Node.js")
    assert {"ASP.NET", "C#", "Node.js"} <= set(primary)


def test_skill_inside_url_is_ignored():
    text = "Portfolio: https://github.com/someone/python-tools\nSkills: React"
    primary = skills.extract_primary_skills(text)
    assert "Python" not in primary
    assert "React" in primary
    assert "GitHub" not in skills.extract_secondary_skills(text)


def test_context_scoring_rewards_markers():
    plain = ["i once used python"]
    strong = ["expert in python with 5 years experience across skills and projects"]
    assert skills.score_contexts(plain) == 1
    assert skills.score_contexts(strong) == 1 + 3 + 2 + 2 + 1
    assert skills.score_contexts(plain + plain) == 2


def test_ranking_orders_by_score_then_vocabulary_order():
    filler = " filler" * 20
    text = "Worked with Java. Also Python." + filler + "\nExpert in React with 6 years of experience."
    ranked = skills.rank_skills(text, skills.PRIMARY_CATEGORIES)
    names = [name for name, _ in ranked]
    assert names[0] == "React"
    # equal scores keep vocabulary order: Python is listed before Java
    assert names.index("Python") < names.index("Java")


def test_primary_skills_are_capped():
    text = "Skills: " + ", ".join(skills.SKILL_CATEGORIES["programming"])
    assert len(skills.extract_primary_skills(text)) == 8


def test_find_skill_contexts_window():
    text = "x" * 100 + " python " + "y" * 100
    contexts = skills.find_skill_contexts(text, "Python")
    assert len(contexts) == 1
    assert len(contexts[0]) == len("python") + 2 * skills.CONTEXT_RADIUS
