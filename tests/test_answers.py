import pytest


@pytest.fixture
def thread(register, insert_question):
    """A question by `asker` plus a second user who answers it."""
    asker_id, asker = register("asker")
    helper_id, helper = register("helper")
    question_id = insert_question(asker_id)
    return {
        "question_id": str(question_id),
        "asker_id": asker_id,
        "asker": asker,
        "helper_id": helper_id,
        "helper": helper,
    }


def post_answer(client, thread, content="Use an httpOnly cookie for the token.", headers=None):
    response = client.post(
        "/api/answers",
        json={"content": content, "questionId": thread["question_id"]},
        headers=headers or thread["helper"],
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_create_answer_links_question_and_author(client, thread, mongo_db):
    answer = post_answer(client, thread)
    assert answer["author"]["username"] == "helper"
    assert answer["question"] == thread["question_id"]
    assert answer["isAccepted"] is False
    assert answer["comments"] == []

    question = client.get(f"/api/questions/{thread['question_id']}").json()
    assert [a["id"] for a in question["answers"]] == [answer["id"]]
    assert question["answerCount"] == 1

    helper = mongo_db.users.find_one({"username": "helper"})
    assert [str(a) for a in helper["answersGiven"]] == [answer["id"]]


def test_create_answer_validation_and_missing_question(client, thread):
    response = client.post(
        "/api/answers",
        json={"content": "short", "questionId": thread["question_id"]},
        headers=thread["helper"],
    )
    assert response.status_code == 400

    response = client.post(
        "/api/answers",
        json={"content": "A long enough answer body.", "questionId": "65a000000000000000000000"},
        headers=thread["helper"],
    )
    assert response.status_code == 404


def test_answers_listed_newest_first(client, thread):
    first = post_answer(client, thread, content="The first answer to arrive.")
    second = post_answer(client, thread, content="The second answer to arrive.")

    answers = client.get(f"/api/answers/question/{thread['question_id']}").json()
    assert [a["id"] for a in answers] == [second["id"], first["id"]]


def test_accept_switches_accepted_answer(client, thread, mongo_db):
    answer_a = post_answer(client, thread, content="Answer A with enough text.")
    answer_b = post_answer(client, thread, content="Answer B with enough text.")

    response = client.put(f"/api/answers/{answer_a['id']}/accept", headers=thread["asker"])
    assert response.status_code == 200
    assert response.json()["message"] == "Answer accepted"
    assert response.json()["answer"]["isAccepted"] is True

    response = client.put(f"/api/answers/{answer_b['id']}/accept", headers=thread["asker"])
    assert response.status_code == 200

    answers = {a["id"]: a for a in client.get(f"/api/answers/question/{thread['question_id']}").json()}
    assert answers[answer_a["id"]]["isAccepted"] is False
    assert answers[answer_b["id"]]["isAccepted"] is True

    question = client.get(f"/api/questions/{thread['question_id']}").json()
    assert question["acceptedAnswer"] == answer_b["id"]
    assert question["hasAcceptedAnswer"] is True

    listing = client.get("/api/questions").json()["questions"][0]
    assert listing["acceptedAnswer"]["id"] == answer_b["id"]


def test_accept_clears_stray_accepted_flags(client, thread, mongo_db):
    answer_a = post_answer(client, thread, content="Answer A with enough text.")
    answer_b = post_answer(client, thread, content="Answer B with enough text.")
    # Flag set without the question pointer, as a half-finished earlier accept would leave it
    mongo_db.answers.update_one({"content": "Answer A with enough text."}, {"$set": {"isAccepted": True}})

    client.put(f"/api/answers/{answer_b['id']}/accept", headers=thread["asker"])

    accepted = list(mongo_db.answers.find({"isAccepted": True}))
    assert [str(a["_id"]) for a in accepted] == [answer_b["id"]]
    assert answer_a["id"] not in [str(a["_id"]) for a in accepted]


def test_only_question_author_can_accept(client, thread):
    answer = post_answer(client, thread)
    response = client.put(f"/api/answers/{answer['id']}/accept", headers=thread["helper"])
    assert response.status_code == 403
    assert response.json() == {"message": "Only question author can accept answers"}


def test_accept_rejects_answer_detached_from_question(client, thread, mongo_db):
    answer = post_answer(client, thread)
    mongo_db.questions.update_one({}, {"$set": {"answers": []}})
    response = client.put(f"/api/answers/{answer['id']}/accept", headers=thread["asker"])
    assert response.status_code == 400


def test_answers_survive_question_soft_delete(client, thread):
    answer = post_answer(client, thread)
    client.delete(f"/api/questions/{thread['question_id']}", headers=thread["asker"])

    answers = client.get(f"/api/answers/question/{thread['question_id']}").json()
    assert [a["id"] for a in answers] == [answer["id"]]

    # No new activity on a deactivated question
    response = client.post(
        "/api/answers",
        json={"content": "Too late to answer this one.", "questionId": thread["question_id"]},
        headers=thread["helper"],
    )
    assert response.status_code == 404
    assert client.put(f"/api/answers/{answer['id']}/accept", headers=thread["asker"]).status_code == 404


def test_delete_answer_cleans_references(client, thread, mongo_db):
    answer = post_answer(client, thread)
    client.put(f"/api/answers/{answer['id']}/accept", headers=thread["asker"])

    assert client.delete(f"/api/answers/{answer['id']}", headers=thread["asker"]).status_code == 403

    response = client.delete(f"/api/answers/{answer['id']}", headers=thread["helper"])
    assert response.status_code == 200
    assert response.json() == {"message": "Answer deleted"}

    question = mongo_db.questions.find_one({})
    assert question["answers"] == []
    assert question["acceptedAnswer"] is None
    assert mongo_db.users.find_one({"username": "helper"})["answersGiven"] == []
    assert mongo_db.answers.count_documents({}) == 0


def test_update_answer(client, thread):
    answer = post_answer(client, thread)
    url = f"/api/answers/{answer['id']}"

    assert client.put(url, json={"content": "Hijacked answer text."}, headers=thread["asker"]).status_code == 403

    response = client.put(url, json={"content": "Edited answer with more detail."}, headers=thread["helper"])
    assert response.status_code == 200
    assert response.json()["content"] == "Edited answer with more detail."


def test_vote_on_answer(client, thread):
    answer = post_answer(client, thread)
    url = f"/api/answers/{answer['id']}/vote"

    assert client.put(url, json={"type": "downvote"}, headers=thread["asker"]).json()["voteCount"] == -1
    assert client.put(url, json={"type": "upvote"}, headers=thread["asker"]).json()["voteCount"] == 1
    assert client.put(url, json={"type": "upvote"}, headers=thread["helper"]).json()["voteCount"] == 2
    assert client.put("/api/answers/65a000000000000000000000/vote", json={"type": "upvote"}, headers=thread["asker"]).status_code == 404


def test_comment_on_answer(client, thread):
    answer = post_answer(client, thread)
    response = client.post(
        f"/api/answers/{answer['id']}/comment",
        json={"content": "Thanks, that worked."},
        headers=thread["asker"],
    )
    assert response.status_code == 200
    comments = response.json()["comments"]
    assert len(comments) == 1
    assert comments[0]["content"] == "Thanks, that worked."
    assert comments[0]["author"]["username"] == "asker"

    answers = client.get(f"/api/answers/question/{thread['question_id']}").json()
    assert answers[0]["comments"][0]["author"]["username"] == "asker"
