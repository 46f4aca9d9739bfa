"""
API tests for site content: promotions, sliders, top winners, banner,
contact settings, theme configuration and the admin stats dashboard.
"""


class TestPromotions:

    def test_create_and_public_list(self, client, admin):
        response = client.post("/api/promotions", headers=admin.headers, json={
            "title_en": "Welcome bonus",
            "game_type": "slots",
            "bonus_settings": {"bonus_type": "percentage", "bonus_value": 50, "max_bonus_limit": 1000},
        })
        client.post("/api/promotions", headers=admin.headers, json={
            "title_en": "Old offer", "game_type": "casino", "status": "Inactive",
        })

        assert response.status_code == 201
        assert response.get_json()["data"]["bonus_settings"]["bonus_value"] == 50.0
        public = client.get("/api/promotions").get_json()["data"]
        assert [p["title_en"] for p in public] == ["Welcome bonus"]

    def test_percentage_above_hundred_rejected(self, client, admin):
        response = client.post("/api/promotions", headers=admin.headers, json={
            "title_en": "Too good", "game_type": "slots", "bonus_type": "percentage", "bonus_value": 150,
        })

        assert response.status_code == 400

    def test_partial_update_checks_stored_percentage(self, client, admin):
        promo = client.post("/api/promotions", headers=admin.headers, json={
            "title_en": "Reload", "game_type": "slots", "bonus_type": "percentage", "bonus_value": 20,
        }).get_json()["data"]

        response = client.put(f"/api/promotions/{promo['id']}", headers=admin.headers, json={"bonus_value": 500})

        assert response.status_code == 400
        assert "bonus_value cannot exceed 100 for percentage bonuses" in response.get_json()["errors"]

    def test_unknown_payment_method(self, client, admin):
        response = client.post("/api/promotions", headers=admin.headers, json={
            "title_en": "Deposit boost", "game_type": "slots", "payment_methods": [42],
        })

        assert response.status_code == 400
        assert "Unknown payment methods: [42]" in response.get_json()["errors"]

    def test_partial_update_and_delete(self, client, admin):
        promo = client.post("/api/promotions", headers=admin.headers,
                            json={"title_en": "Weekend", "game_type": "slots"}).get_json()["data"]

        updated = client.put(f"/api/promotions/{promo['id']}", headers=admin.headers, json={"status": "Inactive"})
        deleted = client.delete(f"/api/promotions/{promo['id']}", headers=admin.headers)

        assert updated.get_json()["data"]["status"] == "Inactive"
        assert updated.get_json()["data"]["title_en"] == "Weekend"
        assert deleted.status_code == 200
        assert client.get(f"/api/promotions/{promo['id']}").status_code == 404

    def test_writes_require_admin(self, client, user):
        response = client.post("/api/promotions", headers=user.headers,
                               json={"title_en": "Nope", "game_type": "slots"})

        assert response.status_code == 403


class TestSliders:

    def test_public_list_shows_active(self, client, admin):
        client.post("/api/sliders", headers=admin.headers,
                    json={"title": "Hero", "imageUrl": "https://cdn.test/hero.png", "status": "active"})
        client.post("/api/sliders", headers=admin.headers,
                    json={"title": "Draft", "imageUrl": "https://cdn.test/draft.png"})

        public = client.get("/api/sliders").get_json()["data"]
        everything = client.get("/api/sliders?all=true", headers=admin.headers).get_json()["data"]

        assert [s["title"] for s in public] == ["Hero"]
        assert len(everything) == 2

    def test_image_required(self, client, admin):
        response = client.post("/api/sliders", headers=admin.headers, json={"title": "Hero"})

        assert response.status_code == 400
        assert "imageUrl is required" in response.get_json()["errors"]


class TestTopWinners:

    def _winner(self, client, admin, username, win_time, **extra):
        body = {"gameName": "Aviator", "gameCategory": "crash", "username": username,
                "winAmount": 1500, "winTime": win_time}
        body.update(extra)
        return client.post("/api/top-winners", headers=admin.headers, json=body)

    def test_newest_first_with_limit(self, client, admin):
        self._winner(client, admin, "first", "2026-01-01T10:00:00Z")
        self._winner(client, admin, "second", "2026-01-02T10:00:00Z")
        self._winner(client, admin, "hidden", "2026-01-03T10:00:00Z", isLive=False)

        winners = client.get("/api/top-winners?limit=1").get_json()["data"]

        assert [w["username"] for w in winners] == ["second"]

    def test_amount_must_be_positive(self, client, admin):
        response = self._winner(client, admin, "zero", "2026-01-01T10:00:00Z", winAmount=0)

        assert response.status_code == 400


class TestBannerAndContact:

    def test_banner_defaults_and_update(self, client, admin):
        default = client.get("/api/banner-text").get_json()["data"]
        assert default["englishText"] == "Welcome to our betting platform!"

        response = client.put("/api/banner-text", headers=admin.headers, json={"englishText": "Big match tonight"})

        assert response.status_code == 200
        assert client.get("/api/banner-text").get_json()["data"]["englishText"] == "Big match tonight"

    def test_banner_rejects_empty_text(self, client, admin):
        response = client.put("/api/banner-text", headers=admin.headers, json={"englishText": "   "})

        assert response.status_code == 400

    def test_contact_urls_validated(self, client, admin):
        bad = client.put("/api/contact-settings", headers=admin.headers, json={"whatsappUrl": "wa.me/123"})
        good = client.put("/api/contact-settings", headers=admin.headers,
                          json={"whatsappUrl": "https://wa.me/123", "telegramUrl": ""})

        assert bad.status_code == 400
        assert good.get_json()["data"]["whatsappUrl"] == "https://wa.me/123"


class TestTheme:

    def test_partial_merge(self, client, admin):
        before = client.get("/api/theme-config").get_json()["data"]

        response = client.put("/api/theme-config", headers=admin.headers,
                              json={"header": {"bgColor": "#123abc", "notAThemeKey": "x"}})

        after = response.get_json()["data"]
        assert response.status_code == 200
        assert after["header"]["bgColor"] == "#123abc"
        assert after["header"]["fontSize"] == before["header"]["fontSize"]
        assert "notAThemeKey" not in after["header"]
        assert after["footer"] == before["footer"]

    def test_nested_section(self, client, admin):
        response = client.put("/api/theme-config", headers=admin.headers,
                              json={"customSections": {"topWinners": {"cardBgColor": "#000000"}}})

        sections = response.get_json()["data"]["customSections"]
        assert sections["topWinners"] == {"cardBgColor": "#000000", "cardTextColor": "#ffffff"}

    def test_bad_values_rejected(self, client, admin):
        response = client.put("/api/theme-config", headers=admin.headers,
                              json={"header": {"bgColor": "blue", "fontSize": "huge"}})

        assert response.status_code == 400
        assert len(response.get_json()["errors"]) == 2

    def test_reset(self, client, admin):
        original = client.get("/api/theme-config").get_json()["data"]
        client.put("/api/theme-config", headers=admin.headers, json={"header": {"bgColor": "#000001"}})

        reset = client.post("/api/theme-config/reset", headers=admin.headers).get_json()["data"]

        assert reset["header"] == original["header"]


class TestStats:

    def test_admin_dashboard(self, client, admin, user):
        response = client.get("/api/stats/admin", headers=admin.headers)

        data = response.get_json()["data"]
        assert response.status_code == 200
        assert data["users"]["total"] == 2
        assert data["users"]["active"] == 2
        assert data["transactions"]["byStatus"]["Pending"]["count"] == 0

    def test_admin_dashboard_requires_admin(self, client, user):
        assert client.get("/api/stats/admin", headers=user.headers).status_code == 403

    def test_user_summary(self, client, user):
        response = client.get("/api/stats/user", headers=user.headers)

        data = response.get_json()["data"]
        assert data["balance"] == 0.0
        assert data["referral"]["referralCode"] == user.referral_code


class TestSiteSettings:

    def test_public_view_hides_account_policy(self, client, admin):
        public = client.get("/api/settings").get_json()["data"]["settings"]
        full = client.get("/api/settings", headers=admin.headers).get_json()["data"]["settings"]

        assert public["organizationName"] == "Betting Platform"
        assert "maxLoginAttempts" not in public
        assert full["maxLoginAttempts"] == 5

    def test_update_merges_and_validates(self, client, admin):
        response = client.put("/api/settings", headers=admin.headers,
                              json={"organizationName": "Khela88", "sessionTimeout": 120})
        rejected = client.put("/api/settings", headers=admin.headers,
                              json={"themeColor": "blue", "maxLoginAttempts": 50})

        settings = response.get_json()["data"]["settings"]
        assert settings["organizationName"] == "Khela88"
        assert settings["sessionTimeout"] == 120
        assert settings["primaryColor"] == "#1E40AF"
        assert rejected.status_code == 400
        assert "themeColor has an invalid value" in rejected.get_json()["errors"]
        assert "maxLoginAttempts must be an integer between 3 and 10" in rejected.get_json()["errors"]

    def test_section_update_ignores_other_keys(self, client, admin):
        response = client.patch("/api/settings/theme", headers=admin.headers,
                                json={"primaryColor": "#000000", "organizationName": "Elsewhere"})

        settings = response.get_json()["data"]["settings"]
        assert response.status_code == 200
        assert settings["primaryColor"] == "#000000"
        assert settings["organizationName"] == "Betting Platform"

    def test_section_update_needs_a_section_key(self, client, admin):
        response = client.patch("/api/settings/landing-page/fonts", headers=admin.headers,
                                json={"organizationName": "Elsewhere"})

        assert response.status_code == 400
        assert response.get_json()["message"].startswith("Provide at least one of: webMenuFontSize")

    def test_navigation_sorted_by_order(self, client, admin):
        response = client.patch("/api/settings/landing-page/navigation", headers=admin.headers, json={
            "navigationItems": [
                {"label": "Casino", "url": "/casino", "order": 2},
                {"label": "Home", "url": "/", "order": 1},
            ],
        })

        items = response.get_json()["data"]["settings"]["navigationItems"]
        assert [item["label"] for item in items] == ["Home", "Casino"]

    def test_reset(self, client, admin):
        client.put("/api/settings", headers=admin.headers, json={"footerText": "Changed"})

        response = client.post("/api/settings/reset", headers=admin.headers)

        assert response.get_json()["message"] == "Settings reset to default values successfully"
        assert response.get_json()["data"]["settings"]["footerText"].startswith("©")

    def test_writes_require_admin(self, client, user):
        assert client.put("/api/settings", headers=user.headers, json={"footerText": "x"}).status_code == 403
        assert client.patch("/api/settings/ui", headers=user.headers, json={"footerText": "x"}).status_code == 403


class TestPromoSection:

    def test_default_is_public(self, client):
        response = client.get("/api/promo-section")

        section = response.get_json()["data"]["promoSection"]
        assert response.status_code == 200
        assert section["isActive"] is True
        assert section["banner"]["ctaLink"] == "/register"

    def test_partial_update_keeps_other_fields(self, client, admin):
        before = client.get("/api/promo-section").get_json()["data"]["promoSection"]

        response = client.put("/api/promo-section", headers=admin.headers,
                              json={"banner": {"ctaText": "Join now"}, "extraBanner": {"link": "#offers"}})

        section = response.get_json()["data"]["promoSection"]
        assert section["banner"]["ctaText"] == "Join now"
        assert section["banner"]["title"] == before["banner"]["title"]
        assert section["extraBanner"]["link"] == "#offers"

    def test_bad_links_rejected(self, client, admin):
        response = client.put("/api/promo-section", headers=admin.headers, json={
            "video": {"youtubeUrl": "https://vimeo.com/123"},
            "banner": {"ctaLink": "register"},
        })

        errors = response.get_json()["errors"]
        assert response.status_code == 400
        assert "video.youtubeUrl must be a valid YouTube URL" in errors
        assert "banner.ctaLink must be a URL, a /path or an #anchor" in errors

    def test_toggle_hides_from_public(self, client, admin):
        response = client.patch("/api/promo-section/toggle", headers=admin.headers)

        assert response.get_json()["message"] == "Promo section deactivated successfully"
        assert client.get("/api/promo-section").status_code == 404
        assert client.get("/api/promo-section", headers=admin.headers).status_code == 200

        client.patch("/api/promo-section/toggle", headers=admin.headers)
        assert client.get("/api/promo-section").status_code == 200


class TestGameCatalog:

    @staticmethod
    def _create(client, admin, collection, **body):
        response = client.post(f"/api/{collection}", headers=admin.headers, json=body)
        assert response.status_code == 201, response.get_json()
        return response.get_json()["data"]

    def test_provider_names_are_unique(self, client, admin):
        self._create(client, admin, "providers", name="Evolution", logo="https://cdn.test/evo.png")

        response = client.post("/api/providers", headers=admin.headers,
                               json={"name": "evolution", "logo": "https://cdn.test/evo2.png"})

        assert response.status_code == 400
        assert "A provider with this name already exists" in response.get_json()["errors"]

    def test_category_rejects_unknown_providers(self, client, admin):
        response = client.post("/api/game-categories", headers=admin.headers, json={
            "nameEnglish": "Slots", "nameBangla": "স্লট", "icon": "https://cdn.test/slots.svg", "providers": [99],
        })

        assert response.status_code == 400
        assert "Unknown providers: [99]" in response.get_json()["errors"]

    def test_games_filtered_by_category_and_flag(self, client, admin):
        provider = self._create(client, admin, "providers", name="Pragmatic", logo="https://cdn.test/pp.png")
        slots = self._create(client, admin, "game-categories", nameEnglish="Slots", nameBangla="স্লট",
                             icon="https://cdn.test/slots.svg", providers=[provider["id"]])
        live = self._create(client, admin, "game-categories", nameEnglish="Live", nameBangla="লাইভ",
                            icon="https://cdn.test/live.svg", displayType="games")
        self._create(client, admin, "games", gameUuid="pp-001", nameEnglish="Sweet Bonanza",
                     nameBangla="সুইট বোনানজা", image="https://cdn.test/sb.png",
                     category=slots["id"], provider=provider["id"], isHot=True)
        self._create(client, admin, "games", gameUuid="lv-001", nameEnglish="Roulette",
                     nameBangla="রুলেট", image="https://cdn.test/rl.png", category=live["id"])

        in_slots = client.get(f"/api/games?category={slots['id']}").get_json()["data"]
        hot = client.get("/api/games?type=hot").get_json()["data"]

        assert [g["gameUuid"] for g in in_slots] == ["pp-001"]
        assert in_slots[0]["provider"]["name"] == "Pragmatic"
        assert in_slots[0]["category"]["nameEnglish"] == "Slots"
        assert [g["gameUuid"] for g in hot] == ["pp-001"]

    def test_game_needs_existing_category_and_unique_uuid(self, client, admin):
        category = self._create(client, admin, "game-categories", nameEnglish="Slots", nameBangla="স্লট",
                                icon="https://cdn.test/slots.svg")
        body = {"gameUuid": "g-1", "nameEnglish": "Aviator", "nameBangla": "এভিয়েটর",
                "image": "https://cdn.test/av.png", "category": category["id"]}
        self._create(client, admin, "games", **body)

        duplicate = client.post("/api/games", headers=admin.headers, json=body)
        orphan = client.post("/api/games", headers=admin.headers, json={**body, "gameUuid": "g-2", "category": 404})

        assert "A game with this UUID already exists" in duplicate.get_json()["errors"]
        assert "category must be an existing game category id" in orphan.get_json()["errors"]

    def test_referenced_rows_cannot_be_deleted(self, client, admin):
        provider = self._create(client, admin, "providers", name="Jili", logo="https://cdn.test/jili.png")
        category = self._create(client, admin, "game-categories", nameEnglish="Fishing", nameBangla="মাছ",
                                icon="https://cdn.test/fish.svg")
        game = self._create(client, admin, "games", gameUuid="jl-7", nameEnglish="Fish Hunter",
                            nameBangla="ফিশ হান্টার", image="https://cdn.test/fh.png",
                            category=category["id"], provider=provider["id"])

        blocked = client.delete(f"/api/providers/{provider['id']}", headers=admin.headers)
        assert blocked.status_code == 400
        assert blocked.get_json()["message"] == "Provider cannot be deleted. It is used by 1 game(s)"
        assert client.delete(f"/api/game-categories/{category['id']}", headers=admin.headers).status_code == 400

        assert client.delete(f"/api/games/{game['id']}", headers=admin.headers).status_code == 200
        assert client.delete(f"/api/game-categories/{category['id']}", headers=admin.headers).status_code == 200

    def test_popular_games_public_and_ordered(self, client, admin):
        for title, order, active in (("Crash", 2, True), ("Aviator", 1, True), ("Hidden", 0, False)):
            self._create(client, admin, "popular-games", title=title, image="https://cdn.test/p.png",
                         redirectUrl="/games/1", order=order, isActive=active)

        public = client.get("/api/popular-games").get_json()["data"]

        assert [g["title"] for g in public] == ["Aviator", "Crash"]


class TestUpcomingMatches:

    @staticmethod
    def _match(client, admin, when, is_live=False, category="cricket"):
        return client.post("/api/upcoming-matches", headers=admin.headers, json={
            "matchType": "T20",
            "category": category,
            "matchDate": when,
            "isLive": is_live,
            "teamA": {"name": "Bangladesh", "flagImage": "https://cdn.test/bd.png", "odds": 1.8},
            "teamB": {"name": "India", "flagImage": "https://cdn.test/in.png", "odds": "2.05"},
        })

    def test_listed_by_match_date(self, client, admin):
        self._match(client, admin, "2026-12-02T14:00:00Z")
        self._match(client, admin, "2026-12-01T09:30:00Z", is_live=True)

        matches = client.get("/api/upcoming-matches").get_json()["data"]
        live = client.get("/api/upcoming-matches?isLive=true").get_json()["data"]

        assert [m["matchDate"][:10] for m in matches] == ["2026-12-01", "2026-12-02"]
        assert matches[0]["teamB"]["odds"] == 2.05
        assert len(live) == 1

    def test_category_filter(self, client, admin):
        self._match(client, admin, "2026-12-02T14:00:00Z")
        self._match(client, admin, "2026-12-03T14:00:00Z", category="football")

        football = client.get("/api/upcoming-matches?category=football").get_json()["data"]

        assert [m["category"] for m in football] == ["football"]

    def test_teams_required_and_merged(self, client, admin):
        missing = client.post("/api/upcoming-matches", headers=admin.headers, json={
            "matchType": "T20", "category": "cricket", "matchDate": "2026-12-02T14:00:00Z",
            "teamA": {"name": "Bangladesh", "odds": 1.8},
        })
        match = self._match(client, admin, "2026-12-02T14:00:00Z").get_json()["data"]

        updated = client.put(f"/api/upcoming-matches/{match['id']}", headers=admin.headers,
                             json={"teamA": {"odds": 1.5}})

        assert missing.status_code == 400
        assert "teamB is required" in missing.get_json()["errors"]
        assert updated.get_json()["data"]["teamA"] == {
            "name": "Bangladesh", "flagImage": "https://cdn.test/bd.png", "odds": 1.5,
        }
