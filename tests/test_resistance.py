"""
Resistance game session tests: lobby, role assignment, mission table,
proposal and mission ballots, and the end-of-game conditions.
"""

import random

import pytest

from ircservices.game.directives import privmsg
from ircservices.game.resistance import (
    Faction, GameSession, PhaseType, Vote, mission_size, spy_count,
)

CHANNEL = "#game"

EXPECTED_SIZES = {
    5: (2, 3, 2, 3, 3),
    6: (2, 3, 4, 3, 4),
    7: (2, 3, 3, 4, 4),
    8: (3, 4, 4, 5, 5),
    9: (3, 4, 4, 5, 5),
    10: (3, 4, 4, 5, 5),
}


def _lobby(count, seed=7):
    """Game with players p0..p{count-1}, p0 being the initiator."""
    game = GameSession.new_game("p0", CHANNEL, rng=random.Random(seed))
    for i in range(1, count):
        game.add_player(f"p{i}")
    return game


def _started(count, seed=7):
    game = _lobby(count, seed)
    game.start()
    return game


def _approve_proposal(game, members):
    game.propose_mission(game.leader, members)
    for player in list(game.players):
        game.cast_proposal_vote(player, "yea")


def _run_mission(game, fails=0):
    """Propose and approve a team of the right size, then play the mission."""
    members = game.players[:game.next_mission_size()]
    _approve_proposal(game, members)
    directives = []
    for i, member in enumerate(members):
        directives = game.cast_mission_vote(member, "nay" if i < fails else "yea")
    return directives


class TestLobby:

    def test_new_game_has_initiator_as_only_player_and_leader(self):
        game = GameSession.new_game("alice", CHANNEL)
        assert game.players == ["alice"]
        assert game.leader == "alice"
        assert not game.started
        assert game.phase == PhaseType.LOBBY

    def test_add_player_acknowledges_privately(self):
        game = GameSession.new_game("alice", CHANNEL)
        directives = game.add_player("bob")
        assert directives == [
            privmsg("bob", "You've joined the game. You'll get your position when it starts.")
        ]
        assert game.players == ["alice", "bob"]

    def test_add_player_twice_changes_nothing(self):
        game = GameSession.new_game("alice", CHANNEL)
        game.add_player("bob")
        directives = game.add_player("bob")
        assert directives == [privmsg(CHANNEL, "You've already joined this game!")]
        assert game.players == ["alice", "bob"]

    def test_add_player_rejected_when_full(self):
        game = _lobby(10)
        directives = game.add_player("late")
        assert directives == [privmsg(CHANNEL, "Sorry, the game is full!")]
        assert len(game.players) == 10

    def test_add_player_rejected_after_start(self):
        game = _started(5)
        directives = game.add_player("late")
        assert directives == [privmsg(CHANNEL, "Sorry, the game is already in progress!")]
        assert "late" not in game.players

    def test_start_needs_five_players(self):
        game = _lobby(4)
        directives = game.start()
        assert directives == [privmsg(CHANNEL, "You need at least five players to play.")]
        assert not game.started

    def test_start_twice_is_rejected(self):
        game = _started(5)
        assert game.start() == [privmsg(CHANNEL, "The game has already begun!")]


class TestRoleAssignment:

    @pytest.mark.parametrize("count", range(5, 11))
    def test_spies_and_rebels_partition_players(self, count):
        game = _started(count)
        assert len(game.spies) == round(0.4 * count) == spy_count(count)
        assert set(game.spies).isdisjoint(game.rebels)
        assert set(game.spies) | set(game.rebels) == set(game.players)
        assert len(game.players) == count

    def test_five_players_give_two_spies_and_a_two_member_first_mission(self):
        game = _lobby(5)
        directives = game.start()
        assert len(game.spies) == 2
        assert len(game.rebels) == 3
        assert directives[-1] == privmsg(CHANNEL, "The first mission requires 2 participants.")
        assert privmsg(CHANNEL, "The game has begun!") in directives

    def test_every_player_learns_their_role_and_spies_learn_each_other(self):
        game = _lobby(7)
        directives = game.start()
        roster = ", ".join(game.spies)
        for spy in game.spies:
            assert privmsg(spy, f"You're a spy in {CHANNEL}.") in directives
            assert privmsg(spy, f"Spies: {roster}") in directives
        for rebel in game.rebels:
            assert privmsg(rebel, f"You're a rebel in {CHANNEL}.") in directives
            assert not any(d.target == rebel and d.trailing.startswith("Spies") for d in directives)

    def test_assignment_is_repeatable_with_the_same_seed(self):
        assert _started(8, seed=99).spies == _started(8, seed=99).spies


class TestMissionTable:

    @pytest.mark.parametrize("count", sorted(EXPECTED_SIZES))
    @pytest.mark.parametrize("index", range(5))
    def test_table_lookup(self, count, index):
        assert mission_size(count, index) == EXPECTED_SIZES[count][index]

    def test_past_the_last_mission_has_no_size(self):
        assert mission_size(5, 5) == 0

    @pytest.mark.parametrize("count", sorted(EXPECTED_SIZES))
    @pytest.mark.parametrize("index", range(5))
    def test_any_other_size_is_rejected(self, count, index):
        game = _started(count)
        game.missions_run = index
        game.missions_won = min(index, 2)
        expected = EXPECTED_SIZES[count][index]
        wrong = game.players[:expected - 1]
        directives = game.propose_mission(game.leader, wrong)
        assert directives == [privmsg(CHANNEL, f"Mission {index + 1} should have {expected} members.")]
        assert game.proposed_members == []


class TestProposals:

    def test_only_the_leader_may_propose(self):
        game = _started(5)
        other = next(p for p in game.players if p != game.leader)
        directives = game.propose_mission(other, game.players[:2])
        assert directives[0].target == other
        assert game.proposed_members == []

    def test_propose_before_start_is_rejected(self):
        game = _lobby(5)
        game.propose_mission("p0", "p0 p1")
        assert game.proposed_members == []

    def test_members_must_be_players(self):
        game = _started(5)
        directives = game.propose_mission(game.leader, "p0 stranger")
        assert directives == [privmsg(CHANNEL, "Proposals must only include registered players.")]
        assert game.proposed_members == []

    def test_members_must_be_distinct(self):
        game = _started(5)
        directives = game.propose_mission(game.leader, "p1 p1")
        assert directives == [privmsg(CHANNEL, "Proposals must not name a player twice.")]

    def test_valid_proposal_opens_a_ballot_for_everyone(self):
        game = _started(5)
        directives = game.propose_mission(game.leader, "p0  p1")
        assert directives == [privmsg(CHANNEL, "Proposed mission: p0, p1")]
        assert game.proposed_members == ["p0", "p1"]
        assert set(game.votes_for_mission) == set(game.players)
        assert all(v == Vote.NOT_YET_VOTED for v in game.votes_for_mission.values())
        assert game.phase == PhaseType.PROPOSAL_VOTE

    def test_second_proposal_while_one_is_pending_is_rejected(self):
        game = _started(5)
        game.propose_mission(game.leader, "p0 p1")
        game.propose_mission(game.leader, "p2 p3")
        assert game.proposed_members == ["p0", "p1"]

    def test_vote_token_must_start_with_y_or_n(self):
        game = _started(5)
        game.propose_mission(game.leader, "p0 p1")
        assert game.cast_proposal_vote("p0", "maybe") == [privmsg(CHANNEL, "You must vote yea or nay.")]
        assert game.votes_for_mission["p0"] == Vote.NOT_YET_VOTED
        game.cast_proposal_vote("p0", "YES")
        assert game.votes_for_mission["p0"] == Vote.YEA

    def test_outsiders_cannot_vote(self):
        game = _started(5)
        game.propose_mission(game.leader, "p0 p1")
        assert game.cast_proposal_vote("stranger", "y") == [
            privmsg("stranger", "You're not involved in this game.")
        ]

    def test_voting_without_a_proposal(self):
        game = _started(5)
        assert game.cast_proposal_vote("p0", "y") == [
            privmsg("p0", "There is no current mission proposal.")
        ]

    def test_accepted_proposal_goes_live(self):
        game = _started(5)
        game.rejected_proposals = 2
        game.propose_mission(game.leader, "p0 p1")
        directives = []
        for player in list(game.players):
            directives = game.cast_proposal_vote(player, "y")
        assert privmsg(CHANNEL, "The mission is now live!") in directives
        assert set(game.mission_votes) == {"p0", "p1"}
        assert game.proposed_members == []
        assert game.rejected_proposals == 0
        assert game.phase == PhaseType.MISSION_VOTE

    def test_tied_ballot_rejects_and_rotates_leader(self):
        game = _started(6)
        old_leader = game.leader
        game.propose_mission(old_leader, "p0 p1")
        directives = []
        for i, player in enumerate(list(game.players)):
            directives = game.cast_proposal_vote(player, "y" if i < 3 else "n")
        assert game.rejected_proposals == 1
        assert game.leader != old_leader
        assert game.proposed_members == []
        assert directives[-1] == privmsg(
            CHANNEL, f"The proposal was rejected (1 / 5). The new leader is {game.leader}."
        )

    def test_fifth_rejection_ends_the_game_for_the_spies(self):
        game = _started(5)
        directives = []
        for _ in range(5):
            game.propose_mission(game.leader, game.players[:2])
            for player in list(game.players):
                directives = game.cast_proposal_vote(player, "n")
        assert game.is_complete()
        assert game.winner == Faction.SPIES
        assert directives[-1] == privmsg(CHANNEL, "Game over: Spies win!")


class TestMissions:

    def test_only_mission_members_vote(self):
        game = _started(5)
        _approve_proposal(game, ["p0", "p1"])
        assert game.cast_mission_vote("p2", "y") == [privmsg("p2", "You're not involved in this mission.")]
        assert game.cast_mission_vote("stranger", "y") == [
            privmsg("stranger", "You're not involved in this game.")
        ]

    def test_no_mission_in_progress(self):
        game = _started(5)
        assert game.cast_mission_vote("p0", "y") == [privmsg("p0", "There is no mission in progress.")]

    def test_invalid_mission_vote_token(self):
        game = _started(5)
        _approve_proposal(game, ["p0", "p1"])
        assert game.cast_mission_vote("p0", "abstain") == [privmsg("p0", "You must vote yea or nay.")]
        assert game.mission_votes["p0"] == Vote.NOT_YET_VOTED

    def test_successful_mission(self):
        game = _started(5)
        directives = _run_mission(game)
        assert game.missions_run == 1
        assert game.missions_won == 1
        assert game.mission_votes == {}
        assert directives[-1] == privmsg(
            CHANNEL,
            f"The mission was a success (S: 1 / 1). The new leader is {game.leader}. "
            "The next mission requires 3 participants."
        )

    def test_sabotaged_mission(self):
        game = _started(5)
        directives = _run_mission(game, fails=2)
        assert game.missions_run == 1
        assert game.missions_won == 0
        assert directives[-1] == privmsg(
            CHANNEL,
            f"The mission was a failure with 2 saboteurs (S: 0 / 1). The new leader is {game.leader}. "
            "The next mission requires 3 participants."
        )

    def test_mission_waits_for_every_member(self):
        game = _started(5)
        _approve_proposal(game, ["p0", "p1"])
        directives = game.cast_mission_vote("p0", "y")
        assert directives == [privmsg("p0", "Your vote has been cast.")]
        assert game.missions_run == 0

    @pytest.mark.parametrize("count, succeeds", [(8, True), (7, True), (6, False), (5, False)])
    def test_fifth_mission_tolerates_one_saboteur_in_large_games(self, count, succeeds):
        game = _started(count)
        game.missions_run = 4
        game.missions_won = 2
        _run_mission(game, fails=1)
        assert game.missions_run == 5
        assert game.missions_won == (3 if succeeds else 2)
        assert game.winner == (Faction.REBELS if succeeds else Faction.SPIES)

    def test_two_saboteurs_fail_the_fifth_mission_anyway(self):
        game = _started(8)
        game.missions_run = 4
        game.missions_won = 2
        _run_mission(game, fails=2)
        assert game.winner == Faction.SPIES

    def test_three_successes_win_for_the_rebels(self):
        game = _started(5)
        directives = []
        for _ in range(3):
            directives = _run_mission(game)
        assert game.is_complete()
        assert game.winner == Faction.REBELS
        assert directives[-1] == privmsg(CHANNEL, "Game over: Rebels win!")
        # The result line no longer announces a next mission.
        assert directives[-2].trailing.endswith(f"The new leader is {game.leader}.")
        assert sum(1 for d in directives if d.trailing.startswith("Game over")) == 1

    def test_three_failures_win_for_the_spies(self):
        game = _started(5)
        directives = []
        for _ in range(3):
            directives = _run_mission(game, fails=1)
        assert game.missions_run == 3
        assert game.is_complete()
        assert directives[-1] == privmsg(CHANNEL, "Game over: Spies win!")


class TestLeaderRotation:

    @pytest.mark.parametrize("seed", range(20))
    def test_new_leader_is_always_someone_else(self, seed):
        game = _started(5, seed=seed)
        for _ in range(10):
            previous = game.leader
            game._rotate_leader()
            assert game.leader != previous
            assert game.leader in game.players


def test_is_complete_matches_the_four_end_conditions():
    game = GameSession.new_game("p0", CHANNEL)
    for run in range(6):
        for won in range(min(run, 3) + 1):
            for rejected in range(6):
                game.missions_run, game.missions_won, game.rejected_proposals = run, won, rejected
                expected = run == 5 or won == 3 or rejected == 5 or run - won >= 3
                assert game.is_complete() == expected, (run, won, rejected)


def test_vote_tokens():
    assert Vote.from_token("y") == Vote.YEA
    assert Vote.from_token("Yea") == Vote.YEA
    assert Vote.from_token("NAY") == Vote.NAY
    assert Vote.from_token("nope") == Vote.NAY
    assert Vote.from_token("") is None
    assert Vote.from_token("abstain") is None


def test_list_players():
    game = _lobby(3)
    assert game.list_players() == [privmsg(CHANNEL, "Players: p0, p1, p2")]
