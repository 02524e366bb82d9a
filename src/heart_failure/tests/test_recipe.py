import numpy as np
import pandas as pd
import pytest

from heart_failure.cleaner import AGE_GROUP_COL
from heart_failure.data_loader import TARGET_COL
from heart_failure.errors import ConfigError, RecipeError, UnseenLevelError
from heart_failure.recipe import Recipe, split_xy


def _make_small_train():
    return pd.DataFrame(
        {
            # numeric
            "ejection_fraction": [20.0, 38.0, 45.0, 60.0],
            "time": [4, 90, 150, 250],
            # categorical
            "smoking": ["No", "Yes", "No", "Yes"],
            "stage": ["a", "b", "c", "a"],
            TARGET_COL: [1, 0, 0, 1],
        }
    )


def _make_small_test(stage="b"):
    return pd.DataFrame(
        {
            "ejection_fraction": [30.0, 50.0],
            "time": [10, 200],
            "smoking": ["Yes", "No"],
            "stage": [stage, "a"],
            TARGET_COL: [1, 0],
        }
    )


def test_recipe_numeric_fields_have_zero_mean_unit_std_on_train(heart_split):
    recipe = Recipe().fit(heart_split.train)
    out = recipe.apply(heart_split.train)

    assert recipe.numeric_cols_
    for col in recipe.numeric_cols_:
        assert out[col].mean() == pytest.approx(0.0, abs=1e-9)
        assert out[col].std(ddof=0) == pytest.approx(1.0, abs=1e-9)


def test_recipe_applies_train_parameters_to_test(heart_split):
    train, test = heart_split.train, heart_split.test
    recipe = Recipe().fit(train)
    out = recipe.apply(test)

    for col in recipe.numeric_cols_:
        expected = (test[col] - train[col].mean()) / train[col].std(ddof=0)
        np.testing.assert_allclose(out[col].to_numpy(), expected.to_numpy(), rtol=1e-9)


def test_recipe_apply_is_idempotent_and_never_refits(heart_split):
    recipe = Recipe().fit(heart_split.train)
    means_before = recipe.means_
    stds_before = recipe.stds_

    first = recipe.apply(heart_split.test)
    second = recipe.apply(heart_split.test)

    pd.testing.assert_frame_equal(first, second)
    assert recipe.means_ == means_before
    assert recipe.stds_ == stds_before


def test_recipe_train_and_test_share_a_schema(heart_split):
    recipe = Recipe(unseen_levels="zero").fit(heart_split.train)
    train_out = recipe.apply(heart_split.train)
    test_out = recipe.apply(heart_split.test)

    assert list(train_out.columns) == list(test_out.columns)
    assert list(train_out.columns[:-1]) == recipe.feature_names_
    assert train_out.columns[-1] == TARGET_COL


def test_recipe_drops_reference_level():
    recipe = Recipe().fit(_make_small_train())
    out = recipe.apply(_make_small_train())

    assert "smoking_Yes" in out.columns and "smoking_No" not in out.columns
    assert "stage_b" in out.columns and "stage_c" in out.columns
    assert "stage_a" not in out.columns
    assert out["stage_b"].tolist() == [0.0, 1.0, 0.0, 0.0]
    assert recipe.n_features_out_ == 2 + 1 + 2


def test_recipe_encodes_age_group_in_bucket_order(heart_split):
    recipe = Recipe().fit(heart_split.train)
    levels = recipe.levels_[AGE_GROUP_COL]
    assert levels == sorted(levels, key=lambda label: int(label.split("-")[0]))
    assert f"{AGE_GROUP_COL}_{levels[0]}" not in recipe.feature_names_
    assert f"{AGE_GROUP_COL}_{levels[1]}" in recipe.feature_names_


def test_recipe_outcome_is_not_encoded():
    recipe = Recipe().fit(_make_small_train())
    assert TARGET_COL not in recipe.numeric_cols_ + recipe.categorical_cols_
    out = recipe.apply(_make_small_train())
    assert out[TARGET_COL].tolist() == [1, 0, 0, 1]


def test_recipe_constant_numeric_field_raises_recipe_error(heart_split):
    train = heart_split.train.assign(serum_sodium=140)
    with pytest.raises(RecipeError) as excinfo:
        Recipe().fit(train)
    assert excinfo.value.field == "serum_sodium"


def test_recipe_unseen_level_raises_with_error_policy():
    recipe = Recipe(unseen_levels="error").fit(_make_small_train())
    with pytest.raises(UnseenLevelError) as excinfo:
        recipe.apply(_make_small_test(stage="z"))
    assert excinfo.value.field == "stage"
    assert excinfo.value.levels == ["z"]


def test_recipe_unseen_level_maps_to_all_zero_row_with_zero_policy():
    recipe = Recipe(unseen_levels="zero").fit(_make_small_train())

    out_a = recipe.apply(_make_small_test(stage="z"))
    out_b = recipe.apply(_make_small_test(stage="z"))

    assert out_a.loc[0, ["stage_b", "stage_c"]].tolist() == [0.0, 0.0]
    # other fields of the same record are encoded normally
    assert out_a.loc[0, "smoking_Yes"] == 1.0
    pd.testing.assert_frame_equal(out_a, out_b)


def test_recipe_unseen_age_group_only_in_test(heart_split):
    train = heart_split.train[heart_split.train[AGE_GROUP_COL] != "90-99"]
    test = heart_split.test.head(3).copy()
    test[AGE_GROUP_COL] = "90-99"

    with pytest.raises(UnseenLevelError):
        Recipe(unseen_levels="error").fit(train).apply(test)

    out = Recipe(unseen_levels="zero").fit(train).apply(test)
    age_cols = [c for c in out.columns if c.startswith(f"{AGE_GROUP_COL}_")]
    assert (out[age_cols] == 0.0).all().all()


def test_recipe_apply_before_fit_raises():
    with pytest.raises(RecipeError, match="not fitted"):
        Recipe().apply(_make_small_train())


def test_recipe_apply_with_missing_column_raises():
    recipe = Recipe().fit(_make_small_train())
    with pytest.raises(RecipeError, match="time"):
        recipe.apply(_make_small_test().drop(columns=["time"]))


def test_recipe_rejects_unknown_policy():
    with pytest.raises(ConfigError):
        Recipe(unseen_levels="impute")


def test_split_xy_separates_outcome():
    recipe = Recipe().fit(_make_small_train())
    X, y = split_xy(recipe.apply(_make_small_train()))
    assert TARGET_COL not in X.columns
    assert y.tolist() == [1, 0, 0, 1]


def test_recipe_fit_apply_matches_fit_then_apply(heart_split):
    recipe = Recipe()
    assert not recipe.is_fitted

    combined = recipe.fit_apply(heart_split.train)

    assert recipe.is_fitted
    separate = Recipe().fit(heart_split.train).apply(heart_split.train)
    pd.testing.assert_frame_equal(combined, separate)
