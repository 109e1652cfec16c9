from nlp import sections


def test_education_combines_degree_and_section_lines():
    text = (
        "Education\n"
        "Bachelor of Technology in Computer Science\n"
        "XYZ University, 2014 - 2018"
    )
    education = sections.extract_education(text)
    assert education.startswith("Bachelor of Technology in Computer Science")
    assert "XYZ University, 2014 - 2018" in education
    assert education.count("Bachelor of Technology") == 1


def test_scrum_master_is_a_certification_not_a_degree():
    text = "Certified Scrum Master, AWS Certified Solutions Architect, PMP"
    assert sections.extract_education(text) is None
    assert sections.extract_certifications(text) == ["AWS Certified", "PMP", "Scrum Master"]


def test_location_cascade():
    assert sections.extract_location("Location: Pune, India") == "Pune, India"
    assert sections.extract_location("Email Address: a@b.com\nBased in Austin, TX") == "Austin, TX"
    assert sections.extract_location("Relocating to Seattle soon") == "Seattle"
    assert sections.extract_location("nothing useful") is None


def test_current_role_cascade():
    assert sections.extract_current_role("Current Role: Senior Data Engineer") == "Senior Data Engineer"
    text = "Project Title: Inventory Tracker\nWorking as a Backend Developer at Foo"
    assert sections.extract_current_role(text) == "Backend Developer at Foo"


def test_summary_requires_some_substance():
    text = "Summary: Backend engineer with eight years building payment systems."
    assert sections.extract_summary(text) == "Backend engineer with eight years building payment systems."
    assert sections.extract_summary("Summary: short") is None


def test_languages_follow_vocabulary_order():
    assert sections.extract_languages("Languages: Tamil, English, Hindi") == ["English", "Hindi", "Tamil"]


def test_projects_and_companies():
    text = (
        "Projects: Built a realtime chat platform with websockets\n"
        "Company: Acme Analytics\n"
        "Infosys"
    )
    assert sections.extract_projects(text) == "Built a realtime chat platform with websockets"
    assert sections.extract_companies(text) == "Acme Analytics; Infosys"


def test_extract_additional_fields_has_every_key():
    fields = sections.extract_additional_fields("")
    assert set(fields) == {
        "education", "location", "current_role", "summary",
        "certifications", "languages", "projects", "companies",
    }
    assert fields["certifications"] == []
    assert fields["education"] is None
