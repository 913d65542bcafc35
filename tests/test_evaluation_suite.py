from evaluation import suite


class TestEvaluationSuite:
    def test_synthetic_data_is_deterministic_with_seed(self):
        first = suite.generate_synthetic_data(100, seed=5)
        second = suite.generate_synthetic_data(100, seed=5)
        assert first == second
        assert len(first) == 100
        assert first == sorted(first)

    def test_build_split(self):
        words = suite.generate_synthetic_data(50, seed=1)
        bloom, trie, train, test = suite.build_split(words, num_hashes=4)
        assert len(train) == 40
        assert len(test) == 10
        assert bloom.size == 400
        assert bloom.num_hashes == 4
        assert len(trie) == 40
        assert all(trie.search(word) for word in train)

    def test_membership_reports_nothing_missing(self, capsys):
        bloom, trie, train, _ = suite.build_split(
            suite.generate_synthetic_data(200, seed=2)
        )
        assert suite.test_membership(bloom, trie, train) == {
            "missing_bloom": 0,
            "missing_trie": 0,
        }
        assert "TEST A" in capsys.readouterr().out

    def test_run_all(self, capsys):
        results = suite.run_all(items=200, seed=3, target_ops=500)
        assert results["membership"] == {"missing_bloom": 0, "missing_trie": 0}
        assert results["trie_wrong"] == 0
        assert 0.0 <= results["false_positive_rate"] <= 1.0
        assert results["performance"]["insert_count"] == 160
        assert results["performance"]["query_count"] == 500
        assert "completed successfully" in capsys.readouterr().out

    def test_main(self, capsys):
        assert suite.main(["--items", "50", "--seed", "4", "--queries", "100"]) == 0
        assert "TEST E" in capsys.readouterr().out

    def test_performance_times_literal_inserts(self, monkeypatch, capsys):
        def refuse_file_check(self, item):
            raise AssertionError("timed inserts must not check the filesystem")

        monkeypatch.setattr(suite.BloomFilter, "add", refuse_file_check)
        bloom, _, train, test = suite.build_split(suite.generate_synthetic_data(60, seed=6))
        metrics = suite.test_performance(bloom, train, test, target_ops=50)
        assert metrics["insert_count"] == 48
        assert metrics["query_count"] == 50
