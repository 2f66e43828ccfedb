from types import SimpleNamespace

from wasfa.services.favorite_service import match_favorites

from conftest import API


def test_match_favorites_is_case_insensitive_substring():
    favorites = [SimpleNamespace(medication_name=n) for n in ("Amoxicillin", "Paracetamol", "Amlodipine")]
    assert [f.medication_name for f in match_favorites(favorites, "AM")] == ["Amoxicillin", "Paracetamol", "Amlodipine"]
    assert [f.medication_name for f in match_favorites(favorites, "cill")] == ["Amoxicillin"]


def test_blank_query_matches_nothing():
    favorites = [SimpleNamespace(medication_name="Amoxicillin")]
    assert match_favorites(favorites, "") == []
    assert match_favorites(favorites, "   ") == []
    assert match_favorites(favorites, None) == []


def test_favorites_crud_and_match(client, assistant_headers):
    for name in ("Paracetamol", "Amoxicillin"):
        response = client.post(
            f"{API}/favorites", json={"medication_name": name, "dosage": "500mg"}, headers=assistant_headers
        )
        assert response.status_code == 201

    listed = client.get(f"{API}/favorites", headers=assistant_headers).json()
    assert [f["medication_name"] for f in listed] == ["Amoxicillin", "Paracetamol"]

    matched = client.get(f"{API}/favorites/match", params={"q": "amox"}, headers=assistant_headers).json()
    assert [f["medication_name"] for f in matched] == ["Amoxicillin"]
    assert client.get(f"{API}/favorites/match", headers=assistant_headers).json() == []

    assert client.delete(f"{API}/favorites/{listed[0]['id']}", headers=assistant_headers).status_code == 204
    assert client.delete(f"{API}/favorites/{listed[0]['id']}", headers=assistant_headers).status_code == 404
