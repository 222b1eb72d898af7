"""
Tests for the matrix primitives, QR decomposition, eigen engine and PCA
"""

import io
import math
import os
import sys
import unittest
from contextlib import redirect_stdout

import numpy as np

# Add src directory to path
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from charreader.eigen import EigenResult, eigen_decomposition, eigenvalues, eigenvector, schur_form
from charreader.errors import DecompositionError, NullInputError, ShapeMismatchError
from charreader.linalg import as_matrix, column_norm, dot, multiply, project, transpose
from charreader.pca import column_means, covariance, principal_components
from charreader.qr import qr_decompose


class TestMatrixPrimitives(unittest.TestCase):
    """Test multiplication, norms and projections"""

    def test_multiply_matches_numpy(self):
        rng = np.random.default_rng(0)
        a = rng.normal(size=(3, 4))
        b = rng.normal(size=(4, 2))
        np.testing.assert_allclose(multiply(a, b), a @ b, atol=1e-12)

    def test_multiply_shape_mismatch(self):
        """A 2x3 matrix cannot be multiplied by a 2x2 matrix"""
        with self.assertRaises(ShapeMismatchError):
            multiply(np.ones((2, 3)), np.ones((2, 2)))

    def test_multiply_does_not_alias_inputs(self):
        a = np.eye(2)
        result = multiply(a, a)
        result[0, 0] = 5.0
        self.assertEqual(a[0, 0], 1.0)

    def test_ragged_matrix_rejected(self):
        with self.assertRaises(ShapeMismatchError):
            as_matrix([[1.0, 2.0], [3.0]])

    def test_none_rejected(self):
        with self.assertRaises(NullInputError):
            multiply(None, np.eye(2))

    def test_column_norm(self):
        self.assertAlmostEqual(column_norm([3.0, 4.0]), 5.0)
        self.assertEqual(column_norm([0.0, 0.0, 0.0]), 0.0)

    def test_dot_and_transpose(self):
        self.assertAlmostEqual(dot([1.0, 2.0, 3.0], [4.0, 5.0, 6.0]), 32.0)
        np.testing.assert_array_equal(transpose([[1, 2, 3]]), [[1], [2], [3]])

    def test_project(self):
        np.testing.assert_allclose(project([2.0, 0.0], [3.0, 4.0]), [3.0, 0.0])

    def test_project_onto_zero_vector(self):
        with self.assertRaises(DecompositionError):
            project([0.0, 0.0], [1.0, 1.0])


class TestQRDecomposition(unittest.TestCase):
    """Test modified Gram-Schmidt QR"""

    def test_reconstruction_and_orthonormality(self):
        rng = np.random.default_rng(42)
        for n in (1, 2, 5, 8):
            a = rng.normal(size=(n, n))
            q, r = qr_decompose(a)
            self.assertLess(np.abs(a - q @ r).max(), 1e-10)
            self.assertLess(np.abs(q.T @ q - np.eye(n)).max(), 1e-10)
            np.testing.assert_array_equal(np.tril(r, -1), np.zeros((n, n)))

    def test_input_left_untouched(self):
        a = np.array([[4.0, 1.0], [2.0, 3.0]])
        before = a.copy()
        qr_decompose(a)
        np.testing.assert_array_equal(a, before)

    def test_rank_deficient_input(self):
        with self.assertRaises(DecompositionError):
            qr_decompose([[1.0, 2.0], [2.0, 4.0]])

    def test_zero_matrix(self):
        with self.assertRaises(DecompositionError):
            qr_decompose(np.zeros((3, 3)))

    def test_non_square_input(self):
        with self.assertRaises(ShapeMismatchError):
            qr_decompose(np.ones((2, 3)))


class TestEigenEngine(unittest.TestCase):
    """Test the QR algorithm and eigenvector recovery"""

    def setUp(self):
        self.diagonal = np.array([[2.0, 0.0], [0.0, 3.0]])
        self.tridiagonal = np.array([[4.0, 1.0, 0.0],
                                     [1.0, 3.0, 1.0],
                                     [0.0, 1.0, 2.0]])

    def test_diagonal_eigenvalues(self):
        values = eigenvalues(self.diagonal)
        np.testing.assert_allclose(sorted(values), [2.0, 3.0], atol=1e-10)

    def test_diagonal_eigenvectors_are_standard_basis(self):
        result = eigen_decomposition(self.diagonal)
        for value, vector in result.pairs():
            index = int(np.argmax(np.abs(vector)))
            expected = np.zeros(2)
            expected[index] = 1.0
            np.testing.assert_allclose(np.abs(vector), expected, atol=1e-10)
            self.assertAlmostEqual(self.diagonal[index, index], value)
        self.assertEqual(result.degenerate, [])

    def test_symmetric_two_by_two(self):
        a = np.array([[2.0, 1.0], [1.0, 2.0]])
        result = eigen_decomposition(a)
        np.testing.assert_allclose(sorted(result.eigenvalues), [1.0, 3.0], atol=1e-10)
        for value, vector in result.pairs():
            np.testing.assert_allclose(a @ vector, value * vector, atol=1e-8)
            self.assertAlmostEqual(column_norm(vector), 1.0)

    def test_three_by_three(self):
        result = eigen_decomposition(self.tridiagonal)
        root3 = math.sqrt(3.0)
        np.testing.assert_allclose(sorted(result.eigenvalues), [3 - root3, 3.0, 3 + root3], atol=1e-8)
        for value, vector in result.pairs():
            np.testing.assert_allclose(self.tridiagonal @ vector, value * vector, atol=1e-6)

    def test_schur_form_is_nearly_triangular(self):
        schur = schur_form(self.tridiagonal, iterations=50)
        self.assertLess(np.abs(np.tril(schur, -1)).max(), 1e-6)

    def test_single_eigenvector(self):
        vector = eigenvector(np.array([[2.0, 1.0], [1.0, 2.0]]), 3.0)
        np.testing.assert_allclose(np.abs(vector), [1 / math.sqrt(2), 1 / math.sqrt(2)], atol=1e-12)

    def test_repeated_eigenvalue_is_flagged(self):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            result = eigen_decomposition(np.eye(2))
        self.assertEqual(result.degenerate, [0, 1])
        self.assertIn("Warning", buffer.getvalue())
        np.testing.assert_allclose(result.eigenvalues, [1.0, 1.0])

    def test_unconverged_eigenvalue_releases_last_pivot(self):
        """Close eigenvalues leave A - λI full rank after 50 iterations"""
        rotation, _ = np.linalg.qr(np.random.default_rng(3).normal(size=(3, 3)))
        a = rotation @ np.diag([1.0, 0.9, 0.5]) @ rotation.T
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            result = eigen_decomposition(a)
        self.assertGreater(len(result.degenerate), 0)
        self.assertIn("Warning: singular system", buffer.getvalue())
        self.assertIn("no free variable found", buffer.getvalue())
        for value, vector in result.pairs():
            self.assertAlmostEqual(column_norm(vector), 1.0)
            self.assertLess(np.abs(a @ vector - value * vector).max(), 1e-3)

    def test_quiet_mode_prints_nothing(self):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            eigen_decomposition(np.eye(2), verbose=False)
        self.assertEqual(buffer.getvalue(), "")

    def test_invalid_iteration_budget(self):
        with self.assertRaises(ValueError):
            schur_form(self.diagonal, iterations=0)

    def test_non_square_rejected(self):
        with self.assertRaises(ShapeMismatchError):
            eigen_decomposition(np.ones((2, 3)))

    def test_none_rejected(self):
        with self.assertRaises(NullInputError):
            eigen_decomposition(None)

    def test_rank_deficient_abandons_request(self):
        with self.assertRaises(DecompositionError):
            eigen_decomposition([[1.0, 1.0], [1.0, 1.0]])

    def test_sorted_result(self):
        result = EigenResult(eigenvalues=np.array([1.0, 3.0, 2.0]),
                             eigenvectors=np.eye(3), degenerate=[0])
        ordered = result.sorted()
        np.testing.assert_array_equal(ordered.eigenvalues, [3.0, 2.0, 1.0])
        np.testing.assert_array_equal(ordered.vector(0), [0.0, 1.0, 0.0])
        self.assertEqual(ordered.degenerate, [2])
        ascending = result.sorted(descending=False)
        np.testing.assert_array_equal(ascending.eigenvalues, [1.0, 2.0, 3.0])


class TestCovarianceAndPCA(unittest.TestCase):
    """Test the covariance matrix and principal components"""

    def setUp(self):
        rng = np.random.default_rng(7)
        self.pixels = rng.normal(size=(60, 3)) * np.array([3.0, 1.0, 0.3]) + 10.0

    def test_constant_matrix_has_zero_covariance(self):
        pixels = np.full((5, 4), 128.0)
        np.testing.assert_array_equal(covariance(pixels), np.zeros((4, 4)))

    def test_covariance_uses_sample_normalisation(self):
        np.testing.assert_allclose(covariance(self.pixels), np.cov(self.pixels, rowvar=False), atol=1e-10)

    def test_column_means(self):
        np.testing.assert_allclose(column_means([[1.0, 2.0], [3.0, 6.0]]), [2.0, 4.0])

    def test_single_row_rejected(self):
        with self.assertRaises(ShapeMismatchError):
            covariance([[1.0, 2.0, 3.0]])

    def test_principal_components_match_reference(self):
        pcs = principal_components(self.pixels)
        reference = np.linalg.eigh(np.cov(self.pixels, rowvar=False))
        expected_values = reference[0][::-1]
        expected_vectors = reference[1][:, ::-1]

        np.testing.assert_allclose(pcs.variances, expected_values, rtol=1e-6)
        for i in range(3):
            alignment = abs(float(np.dot(pcs.components[:, i], expected_vectors[:, i])))
            self.assertAlmostEqual(alignment, 1.0, places=6)
        self.assertAlmostEqual(float(pcs.explained_variance_ratio().sum()), 1.0)

    def test_transform(self):
        pcs = principal_components(self.pixels, n_components=2)
        scores = pcs.transform(self.pixels)
        self.assertEqual(scores.shape, (60, 2))
        np.testing.assert_allclose(scores.mean(axis=0), [0.0, 0.0], atol=1e-9)
        np.testing.assert_allclose(scores.var(axis=0, ddof=1), pcs.variances, rtol=1e-6)

    def test_constant_image_abandons_decomposition(self):
        with self.assertRaises(DecompositionError):
            principal_components(np.full((5, 4), 128.0), verbose=False)

    def test_square_image_abandons_decomposition(self):
        """m rows give a covariance of rank at most m - 1"""
        square = np.random.default_rng(11).integers(0, 256, size=(8, 8)).astype(np.float64)
        with self.assertRaises(DecompositionError):
            principal_components(square, verbose=False)

    def test_blank_column_abandons_decomposition(self):
        glyph = np.zeros((7, 7))
        glyph[:, 1:6] = [[float(ch) for ch in row] for row in
                         ["01110", "10001", "10001", "11111", "10001", "10001", "10001"]]
        with self.assertRaises(DecompositionError):
            principal_components(glyph * 255.0, verbose=False)

    def test_invalid_component_count(self):
        with self.assertRaises(ValueError):
            principal_components(self.pixels, n_components=0)


if __name__ == "__main__":
    unittest.main()
